import logging

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from config import CONFIG
from app import app

if __name__ == "__main__":
    logging.basicConfig(
        level=CONFIG.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
