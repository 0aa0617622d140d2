import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

# ------------------------------
# Debug Configuration
# ------------------------------
DEBUG = os.getenv('DEBUG', 'false').lower() in ('1', 'true', 'yes')

# ------------------------------
# Server Configuration
# ------------------------------
PORT = int(os.getenv('PORT', 3000))

# ------------------------------
# CORS Configuration
# ------------------------------
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv('CORS_ORIGINS', '*').split(',')
    if origin.strip()
]

# ------------------------------
# Logging Configuration
# ------------------------------
LOG_FILE = os.getenv('LOG_FILE', 'webhook.log')
LOG_MAX_BYTES = 5 * 1024 * 1024  # 5MB per log file
LOG_BACKUP_COUNT = 5  # Number of backup log files

# Logging Levels
ROOT_LOG_LEVEL = logging.INFO
CONSOLE_LOG_LEVEL = logging.INFO
FILE_LOG_LEVEL = logging.DEBUG if DEBUG else logging.INFO

# Logging Format
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# External Libraries Logging Suppression
EXTERNAL_LOGGERS = [
    'urllib3',
    'werkzeug'
]

# ------------------------------
# Bot Configuration
# ------------------------------
BOT_NAME = "Panda Sushi"

# Session id used when the webhook request carries no usable session path
DEFAULT_SESSION_ID = "default"

# ------------------------------
# Kitchen Configuration
# ------------------------------
KITCHEN_READY_DELAY_SECONDS = float(os.getenv('KITCHEN_READY_DELAY_SECONDS', 5))

ORDER_NUMBER_MIN = 1000
ORDER_NUMBER_MAX = 9999

# ------------------------------
# Extraction Configuration
# ------------------------------
# Retry food matching on a typo-corrected utterance when exact matching fails
FUZZY_MATCHING = True
FUZZY_MAX_DISTANCE = 1
FUZZY_MIN_WORD_LENGTH = 5
