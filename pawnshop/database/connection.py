import logging
import re

import motor.motor_asyncio
from beanie import init_beanie

from pawnshop.core.config import Settings
from pawnshop.database.models import DOCUMENT_MODELS

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# Never log full connection URIs, they may contain credentials
def _mask_mongo_uri(uri: str) -> str:
    m = re.match(r'(?P<prefix>mongodb(?:\+srv)?://)(?:(?P<creds>[^@]+)@)?(?P<rest>.+)', uri or "")
    if not m:
        return "mongodb://<redacted>"
    host_part = m.group('rest').split('/')[0]
    return f"{m.group('prefix')}***@{host_part}"


async def init_db(settings: Settings):
    """Connect to MongoDB and register the Beanie document models.

    Returns the database handle. Raises RuntimeError when configuration is missing
    so the application fails at startup instead of on the first request.
    """
    mongodb_uri = settings.MONGODB_URI
    mongodb_db_name = settings.MONGODB_DB_NAME

    if not mongodb_uri:
        logger.error("MONGODB_URI is not set in environment variables")
        raise RuntimeError("Configuration error: MONGODB_URI is not set in environment variables")
    if not mongodb_db_name:
        logger.error("MONGODB_DB_NAME is not set in environment variables")
        raise RuntimeError("Configuration error: MONGODB_DB_NAME is not set in environment variables")

    logger.info("Attempting to connect to MongoDB at: %s", _mask_mongo_uri(mongodb_uri))
    logger.info("Database name: %s", mongodb_db_name)

    try:
        # tz_aware so stored datetimes come back as UTC-aware values
        client = motor.motor_asyncio.AsyncIOMotorClient(
            mongodb_uri,
            tz_aware=True,
            serverSelectionTimeoutMS=30000,
            connectTimeoutMS=30000,
            socketTimeoutMS=30000,
            retryWrites=True,
        )

        logger.info("Testing MongoDB connection...")
        await client.admin.command('ping')
        logger.info("Successfully connected to MongoDB!")

        database = client[mongodb_db_name]

        logger.info("Initializing Beanie with document models...")
        await init_beanie(database, document_models=DOCUMENT_MODELS)
        logger.info("Beanie initialized successfully!")

        return database
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        logger.error(f"Exception type: {type(e)}")
        raise
