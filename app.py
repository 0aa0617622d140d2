import logging
import sys
from logging.handlers import RotatingFileHandler

from flask import Flask, request, jsonify
from flask_cors import CORS

import config
from chat import Dispatcher, get_session_id
from kitchen import Kitchen
from sessions import SessionStore

## Logging Configuration ##

# Create the root logger
root_logger = logging.getLogger()
root_logger.setLevel(config.ROOT_LOG_LEVEL)

# Create formatter
formatter = logging.Formatter(config.LOG_FORMAT)

# Create and configure console handler
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(config.CONSOLE_LOG_LEVEL)
console_handler.setFormatter(formatter)
root_logger.addHandler(console_handler)

# Create and configure rotating file handler
file_handler = RotatingFileHandler(
    config.LOG_FILE,
    maxBytes=config.LOG_MAX_BYTES,
    backupCount=config.LOG_BACKUP_COUNT
)
file_handler.setLevel(config.FILE_LOG_LEVEL)
file_handler.setFormatter(formatter)
root_logger.addHandler(file_handler)

# Suppress verbose logs from external libraries
for logger_name in config.EXTERNAL_LOGGERS:
    logging.getLogger(logger_name).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

## End of Logging Configuration ##


def create_app(dispatcher=None):
    """Build the webhook app around one Dispatcher and its stores."""
    if dispatcher is None:
        dispatcher = Dispatcher(SessionStore(), Kitchen())

    app = Flask(__name__)
    CORS(app, resources={r"/*": {"origins": config.CORS_ORIGINS}})
    app.config["DISPATCHER"] = dispatcher

    @app.route('/webhook', methods=['POST'])
    def webhook():
        # Malformed bodies still get a reply; the dispatcher answers with its fallback
        event = request.get_json(silent=True) or {}
        return jsonify(dispatcher.handle_event(event))

    @app.route('/get_order', methods=['GET'])
    def get_order():
        session_id = request.args.get('session_id')
        if not session_id:
            return jsonify({"error": "Missing session_id"}), 400

        cart = dispatcher.cart
        details = dispatcher.store.peek_details(session_id)
        return jsonify({
            "session_id": session_id,
            "items": [
                {
                    "item": line.item,
                    "quantity": line.quantity,
                    "modifiers": [str(mod) for mod in line.modifiers],
                    "price": cart.line_price(line.item, line.quantity),
                }
                for line in dispatcher.store.cart(session_id)
            ],
            "total": cart.total(session_id),
            "summary": cart.summary(session_id),
            "guest": {
                "name": details.name if details else None,
                "table": details.table if details else None,
                "pickup_time": details.pickup_time if details else None,
            },
        })

    @app.route('/reset_session', methods=['POST'])
    def reset_session():
        data = request.get_json(silent=True) or {}
        session_id = data.get('session_id')
        if not session_id and data.get('session'):
            session_id = get_session_id(data['session'])

        if not session_id:
            logger.warning("reset_session called without session_id.")
            return jsonify({"error": "session_id not provided."}), 400

        dispatcher.store.clear(session_id)
        return jsonify({"status": "Session reset successfully."}), 200

    @app.route('/kitchen', methods=['GET'])
    def kitchen_tickets():
        return jsonify({"tickets": [ticket.to_dict() for ticket in dispatcher.kitchen.tickets()]})

    @app.route('/health', methods=['GET'])
    def health_check():
        """
        Health check endpoint to verify that the server is running.
        """
        return jsonify({"status": "ok"}), 200

    @app.route('/')
    def home():
        return f"{config.BOT_NAME} webhook running"

    return app


app = create_app()


def main():
    logger.info(f"Webhook live on port {config.PORT}")
    app.run(host="0.0.0.0", port=config.PORT, debug=config.DEBUG)


if __name__ == '__main__':
    main()
