# run.py
# Development entry point: builds the ProductStore app and serves it with Flask's server.
import sys
from productstore.app import create_app
from productstore.config.settings import load_config
from productstore.database import dispose_sqlalchemy_engine
from productstore.utils.logger import logger

def main() -> int:
    config = load_config()
    app = create_app(config)
    logger.info(
        f"Serving ProductStore on {config.APP_HOST}:{config.APP_PORT} "
        f"(association loading: {config.ASSOCIATION_LOAD_STRATEGY}, page size {config.DEFAULT_PAGE_SIZE}/{config.MAX_PAGE_SIZE})"
    )
    try:
        # Use waitress or gunicorn in production
        app.run(host=config.APP_HOST, port=config.APP_PORT, debug=config.APP_DEBUG)
    except OSError as e:
        logger.critical(f"Could not bind {config.APP_HOST}:{config.APP_PORT}: {e}", exc_info=True)
        return 1
    finally:
        dispose_sqlalchemy_engine()
    return 0

if __name__ == '__main__':
    sys.exit(main())
