import click
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix
from config import config

db = SQLAlchemy()


def create_app(config_name='default'):
    """Application factory — creates and configures the Flask app."""
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # ── Logging ───────────────────────────────────────────────────
    from promostudio.utils.logging import setup_logging
    setup_logging(app)

    # ── Extensions ────────────────────────────────────────────────
    db.init_app(app)

    # ── Blueprints ────────────────────────────────────────────────
    from promostudio.main import main as main_blueprint
    app.register_blueprint(main_blueprint)

    from promostudio.promotions import promotions as promotions_blueprint
    app.register_blueprint(promotions_blueprint, url_prefix='/promotions')

    # ── Error Handlers ────────────────────────────────────────────
    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({'error': e.description, 'status': e.code}), e.code

    @app.errorhandler(500)
    def internal_error(e):
        app.logger.error(f'Unhandled error: {e}')
        return jsonify({'error': 'Internal server error', 'status': 500}), 500

    # ── CLI Commands ──────────────────────────────────────────────
    register_commands(app)

    # ── ProxyFix for HTTPS termination ────────────────────────────
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    return app


def register_commands(app):
    """Register custom Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db():
        """Create all database tables."""
        db.create_all()
        click.echo('✅  Database tables created.')

    @app.cli.command('seed-demo')
    def seed_demo():
        """Populate the catalog with demo promotions."""
        from promostudio.promotions.models import PromotionRecord
        from promostudio.promotions.validators import (
            parse_promotion_payload, validate_promotion_payload,
        )
        from promostudio.seed import DEMO_PROMOTIONS

        click.echo('🌱 Seeding demo promotions...')
        db.create_all()

        created = 0
        for payload in DEMO_PROMOTIONS:
            if db.session.get(PromotionRecord, payload['id']):
                continue
            errors = validate_promotion_payload(payload)
            if errors:
                click.echo(f'⚠️  Skipping {payload["id"]}: {errors}')
                continue
            record = PromotionRecord(id=payload['id'], **parse_promotion_payload(payload))
            db.session.add(record)
            created += 1

        db.session.commit()
        click.echo(f'✅ {created} demo promotion(s) created.')

    @app.cli.command('check-conflicts')
    def check_conflicts():
        """List exclusive promotions whose schedules overlap (diagnostic)."""
        from promostudio.promotions.conflicts import find_conflicts
        from promostudio.promotions.models import list_catalog

        found = find_conflicts(list_catalog())
        if not found:
            click.echo('✅ No schedule conflicts.')
            return
        click.echo(f'{"Promotion A":<28} {"Promotion B":<28} {"Overlap"}')
        click.echo('─' * 80)
        for c in found:
            click.echo(f'{c.promotion_a.name[:27]:<28} {c.promotion_b.name[:27]:<28} {c.description}')

