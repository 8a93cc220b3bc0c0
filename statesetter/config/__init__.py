from .statesetter_config import StateSetterConfig, UnsupportedPlatformError
