import asyncio
import os
import sys
from dotenv import load_dotenv

# STEP 1: Set up the Python path for imports
# ------------------------------------------
# Add the 'Backend' directory to the system path so we can import the 'onesync' package.
backend_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'Backend'))
sys.path.append(backend_dir)

# STEP 2: Load environment variables
# ----------------------------------
# Load the .env file from the project root to get the DATABASE_URL.
project_root = os.path.dirname(backend_dir)
load_dotenv(os.path.join(project_root, ".env"))
print(" Environment loaded.")

# STEP 3: Import application modules (NOW that path and env are set)
# -----------------------------------------------------------------
from onesync.services.database import engine, Base

# Import all models so SQLAlchemy knows about them and can create the tables.
from onesync.models.user import User
from onesync.models.artist import Artist
from onesync.models.release import Release
from onesync.models.track import Track
from onesync.models.analytics import AnalyticsRecord
from onesync.models.payment import PaymentHistory
from onesync.models.withdrawal import WithdrawalRequest
from onesync.models.royalty_advance import RoyaltyAdvance
from onesync.models.background_job import BackgroundJob
print(" Application modules imported successfully.")

# --- Main Table Creation Logic ---
async def create_all_tables():
    """Connects to the database and creates all tables for the imported models."""
    print("\nConnecting to the database to create tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print(f" Created {len(Base.metadata.tables)} tables: {', '.join(sorted(Base.metadata.tables))}")
    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(create_all_tables())
