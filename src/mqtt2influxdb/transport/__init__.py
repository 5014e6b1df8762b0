from .mqtt import BrokerAddress, MqttSource

__all__ = ["BrokerAddress", "MqttSource"]
