"""
Quick test to verify the Google Sheets connection and worksheet layout

Creates any missing worksheet (with headers) and prints row counts.

Run: python scripts/check_sheets.py
"""

import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

import logging

from app.core.config import settings
from app.db.sheets import SheetsClient
from app.services.ledger_service import GoogleSheetsLedger

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


async def check_connection():
    """Test Google Sheets connection"""
    print("=" * 60)
    print("  Google Sheets Connection Test")
    print("=" * 60 + "\n")

    logger.info(f"📋 GOOGLE_SHEETS_ID: {'✅ OK' if settings.GOOGLE_SHEETS_ID else '❌ missing'}")
    logger.info(f"📧 GOOGLE_CLIENT_EMAIL: {'✅ OK' if settings.GOOGLE_CLIENT_EMAIL else '❌ missing'}")
    logger.info(f"🔑 GOOGLE_PRIVATE_KEY: {'✅ OK' if settings.GOOGLE_PRIVATE_KEY else '❌ missing'}")
    logger.info(f"📄 GOOGLE_CREDENTIALS_PATH: {settings.GOOGLE_CREDENTIALS_PATH or '(not set)'}\n")

    if not settings.has_sheets_credentials:
        raise ValueError("❌ Google Sheets credentials must be set in .env file")

    client = SheetsClient()
    ledger = GoogleSheetsLedger(client)

    try:
        spreadsheet = client.get_spreadsheet()
        logger.info(f"✅ Connected to: {spreadsheet.title}\n")

        # Touching every worksheet creates the missing ones
        stats = await ledger.get_stats()
        logger.info("✅ Worksheets verified/created")

        logger.info("📄 Worksheets available:")
        for title in client.worksheet_titles():
            logger.info(f"   • {title}")

        logger.info("\n📊 Statistics:")
        for sheet, count in stats.items():
            logger.info(f"   {sheet}: {count}")

    except Exception as e:
        logger.error(f"❌ Test failed: {e}")
        message = str(e).lower()
        if "permission" in message:
            logger.info(f"💡 Share the spreadsheet with {settings.GOOGLE_CLIENT_EMAIL}")
        elif "not found" in message:
            logger.info("💡 Check GOOGLE_SHEETS_ID in .env")
        raise

    print("\n" + "=" * 60)


if __name__ == "__main__":
    asyncio.run(check_connection())
