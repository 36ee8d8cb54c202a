"""
Configuration settings for the Art Gallery application
"""
import os


def _env_flag(name, default='false'):
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes')


class Config:
    """Flask application configuration"""
    
    # Flask secret key for sessions
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production-12345'
    
    # Database configuration
    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'gallery.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    
    # Honour X-Forwarded-For. Must be set behind a reverse proxy, otherwise
    # every visit is recorded with the proxy address
    TRUST_PROXY = _env_flag('TRUST_PROXY')
    
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    
    # Geolocation lookups
    GEO_LOOKUP_URL = os.environ.get('GEO_LOOKUP_URL') or 'https://ipapi.co/{ip}/json/'
    GEO_LOOKUP_TIMEOUT = float(os.environ.get('GEO_LOOKUP_TIMEOUT', 5))
    GEO_CACHE_TTL = int(os.environ.get('GEO_CACHE_TTL', 24 * 60 * 60))
    
    # Dwell tracking
    TRACKING_UPDATE_INTERVAL = int(os.environ.get('TRACKING_UPDATE_INTERVAL', 30))
    TRACKING_IDLE_TIMEOUT = int(os.environ.get('TRACKING_IDLE_TIMEOUT', 300))
    TRACKING_WORKERS = int(os.environ.get('TRACKING_WORKERS', 4))
    TRACKING_INLINE = _env_flag('TRACKING_INLINE')


class TestConfig(Config):
    """Testing configuration"""
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    WTF_CSRF_ENABLED = False
    TRACKING_INLINE = True
    LOG_LEVEL = 'DEBUG'
