from datetime import datetime

from flask import Flask, jsonify, session

from config import DEFAULT_CURRENCY, SECRET_KEY, ensure_indexes
from dompet import __version__
from dompet.api import get_workspace, register_blueprints
from dompet.currency import format_currency
from dompet.repositories.categories import CategoryRepository
from model import index_specs


def init_database():
    """Create indexes and seed the default categories"""
    try:
        ensure_indexes(index_specs)
        print("✅ Database indexes created successfully")
    except Exception as e:
        print(f"⚠️ Warning: Could not create database indexes: {e}")
        print("Application will continue without indexes...")
    try:
        CategoryRepository().seed_defaults()
    except Exception as e:
        print(f"⚠️ Warning: Could not seed default categories: {e}")


def create_app(init_db: bool = True) -> Flask:
    app = Flask(__name__)
    app.secret_key = SECRET_KEY

    if init_db:
        init_database()

    register_blueprints(app)

    # Context processor to add total balance and username to all templates
    @app.context_processor
    def inject_global_data():
        """Inject total balance and username from session into all templates"""
        user_id = session.get("user_id")
        if not user_id:
            return {"total_balance": 0, "username": "User"}
        return {
            "total_balance": get_workspace().wallets.total_balance(),
            "username": session.get("username") or "User",
        }

    # Custom Jinja filters
    @app.template_filter("currency")
    def currency_filter(value, currency=DEFAULT_CURRENCY):
        """Format amount, e.g. Rp 1.500.000"""
        return format_currency(value, currency)

    @app.template_filter("datetime")
    def datetime_filter(timestamp):
        """Format timestamp to readable datetime"""
        try:
            if not timestamp:
                return "Never"
            return datetime.fromtimestamp(timestamp).strftime("%d %b %Y %H:%M")
        except (ValueError, TypeError, OSError):
            return "Invalid date"

    @app.get("/health")
    def health():
        return jsonify({"status": "ok", "version": __version__})

    return app


if __name__ == "__main__":
    print("🚀 Starting Dompet Finance Application...")
    print("📍 Application will be available at: http://localhost:5006")
    print("💡 Press Ctrl+C to stop the application")
    try:
        create_app().run(debug=True, host="0.0.0.0", port=5006)
    except KeyboardInterrupt:
        print("\n👋 Application stopped by user")
    except Exception as e:
        print(f"❌ Error starting application: {e}")
