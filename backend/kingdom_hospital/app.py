import logging
import os

from .main import check_database_connection, create_app

logger = logging.getLogger(__name__)

# Create Flask app
app = create_app()

if __name__ == "__main__":
    if not check_database_connection():
        logger.warning("Starting without a reachable database")

    # PORT from environment (production) or 5000 for local dev
    port = int(os.getenv("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=os.getenv("FLASK_DEBUG", "0") == "1")
