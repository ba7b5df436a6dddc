from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv
import os
import logging
from pathlib import Path

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

logger = logging.getLogger(__name__)

class Database:
    client: AsyncIOMotorClient = None
    db = None

    async def connect(self):
        try:
            mongo_url = os.environ['MONGO_URL']
            self.client = AsyncIOMotorClient(mongo_url)
            self.db = self.client[os.environ['DB_NAME']]
            # Verify connection
            await self.db.command("ping")
            logger.info(f"Connected to MongoDB: {os.environ['DB_NAME']}")

            await self._create_indexes()
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    async def close(self):
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed")

    def get_db(self):
        return self.db

    async def _create_indexes(self):
        """Create MongoDB indexes for account, usage and payment lookups."""
        try:
            try:
                await self.db.users.create_index("email", unique=True)
            except Exception:
                pass  # Index may already exist with different options
            await self.db.users.create_index("user_id", unique=True)

            await self.db.profiles.create_index("user_id", unique=True)
            # Premium expiry sweep
            await self.db.profiles.create_index([("is_premium", 1), ("premium_expires_at", 1)])

            # One usage row per user per month
            try:
                await self.db.tool_usage.create_index(
                    [("user_id", 1), ("month", 1)],
                    unique=True
                )
            except Exception:
                pass

            await self.db.subscriptions.create_index("subscription_id", unique=True)
            await self.db.subscriptions.create_index([("user_id", 1), ("created_at", -1)])
            await self.db.subscriptions.create_index("razorpay_order_id", sparse=True)
            await self.db.subscriptions.create_index("polar_checkout_id", sparse=True)
            await self.db.subscriptions.create_index("polar_subscription_id", sparse=True)
            await self.db.subscriptions.create_index([("status", 1), ("created_at", 1)])

            await self.db.password_resets.create_index("token_hash", unique=True)
            await self.db.password_resets.create_index("expires_at")

            await self.db.contact_messages.create_index([("created_at", -1)])

            await self.db.audit_logs.create_index([("actor_id", 1), ("timestamp", -1)])
            await self.db.audit_logs.create_index([("action", 1), ("timestamp", -1)])
            logger.info("MongoDB indexes created/verified")
        except Exception as e:
            # Indexes may already exist, log but don't fail
            logger.warning(f"Index creation note: {e}")

# Global database instance
database = Database()

