"""mqttui: browse MQTT topics and tail live messages in the terminal."""

__version__ = "0.1.0"
