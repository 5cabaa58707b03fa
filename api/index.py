"""Serverless function entry point."""
import sys
import os
import logging

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Configure logging for Vercel
logging.basicConfig(level=logging.INFO)

from main import app  # noqa: E402
from mangum import Mangum  # noqa: E402

# Startup and shutdown run around each invocation, so the browser never
# outlives the function call
handler = Mangum(app, lifespan="auto")
