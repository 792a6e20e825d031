from flask import Flask, request, jsonify
from flask_cors import CORS
import logging
import sys

from config import Config
from stockdata import StockDataManager, get_db_stats, resolve_db_path
from stockdata.errors import StockDataError, ConfigError

logger = logging.getLogger(__name__)


def create_app(config: Config = None, manager: StockDataManager = None) -> Flask:
    """
    Build the Flask application.

    Args:
        config: Settings; read from the environment when omitted
        manager: Pre-built StockDataManager (for dependency injection)
    """
    if config is None:
        config = Config.from_env()

    db_path = resolve_db_path(config.DATABASE_DSN)
    if manager is None:
        manager = StockDataManager.from_config(config, db_path)

    app = Flask(__name__)
    CORS(app, origins=config.ALLOWED_ORIGINS)

    @app.errorhandler(StockDataError)
    def handle_stock_data_error(error):
        """Plain-text error body with the status the error maps to"""
        if error.status_code >= 500:
            logger.error(f"{request.method} {request.path} failed: {error}")
        else:
            logger.info(f"{request.method} {request.path} rejected: {error}")
        return str(error), error.status_code, {'Content-Type': 'text/plain; charset=utf-8'}

    @app.route('/api/stocks/<symbol>', methods=['GET'])
    def get_stock_data(symbol):
        """Return cached daily data for a symbol over ?range=week|month|6month|year"""
        time_range = request.args.get('range', '')
        logger.info(f"GET stock data: symbol={symbol} range={time_range}")

        data = manager.get_range(symbol, time_range)

        logger.info(f"Fetched {len(data)} stock data entries for symbol {symbol}")
        response = jsonify(data)
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
        return response

    @app.route('/api/stocks/<symbol>/refresh', methods=['POST'])
    def refresh_stock_data(symbol):
        """Force a reconciliation pass against the upstream API"""
        new_records = manager.fetch_and_store(symbol)
        return jsonify({
            'message': 'Stock data refreshed',
            'newRecords': new_records
        })

    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({'status': 'healthy', **get_db_stats(manager.db_path)})

    return app


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    try:
        config = Config.from_env()
        app = create_app(config)
    except ConfigError as e:
        logger.critical(str(e))
        sys.exit(1)

    logging.getLogger().setLevel(config.LOG_LEVEL)
    logger.info(f"Server starting on port {config.PORT}")
    app.run(host='0.0.0.0', debug=config.DEBUG, port=config.PORT)
