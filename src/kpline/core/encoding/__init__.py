"""Text encoders for the InfluxDB line protocol."""
