class ConversionError(Exception):
    """Custom exception for conversion errors."""
