import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Together AI API Configuration
TOGETHER_API_KEY = os.getenv("TOGETHER_API_KEY")
TOGETHER_API_URL = os.getenv(
    "TOGETHER_API_URL", "https://api.together.xyz/v1/images/generations"
)
TOGETHER_TIMEOUT = float(os.getenv("TOGETHER_TIMEOUT", "120"))  # seconds

# MCP Server Configuration
SERVER_NAME = "togetherai-image-server"
SERVER_VERSION = "0.1.0"

# Image Generation Defaults
DEFAULT_IMAGE_MODEL = os.getenv(
    "DEFAULT_IMAGE_MODEL", "black-forest-labs/FLUX.1.1-pro"
)
DEFAULT_WIDTH = 1024
DEFAULT_HEIGHT = 768
DEFAULT_STEPS = 28
DEFAULT_IMAGE_COUNT = 1
DEFAULT_FORMAT = "png"
SUPPORTED_FORMATS = ("png", "jpg", "svg")

# The API rejects anything smaller than this on either side
MIN_API_DIMENSION = 256
JPEG_QUALITY = 90

# Output Configuration
DEFAULT_OUTPUT_DIRNAME = os.getenv(
    "DEFAULT_OUTPUT_DIRNAME", "output"
)  # resolved against the working directory

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() == "true"
LOG_FILE_PATH = os.getenv("LOG_FILE_PATH", "logs/togetherai_image_server.log")
