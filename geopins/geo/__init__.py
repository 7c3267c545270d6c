"""Geographic value types and the Web Mercator viewport."""
