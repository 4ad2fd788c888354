# Main Flask app
import logging
import os
from logging.handlers import RotatingFileHandler

from flask import Flask
from flask_cors import CORS

from config import config, DEV_JWT_SECRET
from errors import register_error_handlers
from extensions import db, bcrypt, jwt
from routes import auth_bp, posts_bp, main_bp


def configure_logging(app):
    app.logger.setLevel(app.config['LOG_LEVEL'])
    if app.testing:
        return

    os.makedirs(app.config['LOG_DIR'], exist_ok=True)
    file_handler = RotatingFileHandler(os.path.join(app.config['LOG_DIR'], 'bulletin.log'),
                                       maxBytes=10240, backupCount=10)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'))
    file_handler.setLevel(app.config['LOG_LEVEL'])
    app.logger.addHandler(file_handler)


def create_app(config_name='default', overrides=None):
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    if overrides:
        app.config.from_mapping(overrides)

    configure_logging(app)
    if app.config['JWT_SECRET_KEY'] == DEV_JWT_SECRET:
        app.logger.warning('JWT_SECRET_KEY is not set; using the development key')

    CORS(app, supports_credentials=True,
         resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}})

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)

    register_error_handlers(app)

    # Register blueprints
    app.register_blueprint(main_bp, url_prefix='/')
    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(posts_bp, url_prefix='/api/posts')

    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)
    with app.app_context():
        db.create_all()

    app.logger.info('Bulletin board startup')
    return app


if __name__ == '__main__':
    app = create_app(os.environ.get('FLASK_CONFIG', 'default'))
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, threaded=True)
