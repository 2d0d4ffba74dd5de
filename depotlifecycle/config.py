import os


def parse_users(raw: str) -> dict:
    """Turn ``"user:password,other:secret"`` into a username -> password map."""
    users = {}
    for pair in (raw or '').split(','):
        name, sep, password = pair.strip().partition(':')
        if name and sep:
            users[name] = password
    return users


class BaseConfig:
    SECRET_KEY = os.getenv('SECRET_KEY', 'change-me')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///depot.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    API_USERS = parse_users(os.getenv('API_USERS', ''))
    VALIDATE_USER_NAME = os.getenv('VALIDATE_USER_NAME', 'validate')
    API_PAUSED = os.getenv('API_PAUSED', 'false').lower() == 'true'

class DevConfig(BaseConfig):
    DEBUG = True
    ENV = 'development'

class ProdConfig(BaseConfig):
    DEBUG = False
    ENV = 'production'

class TestConfig(BaseConfig):
    TESTING = True
    ENV = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    API_USERS = {'depot': 'depot', 'validate': 'validate'}
    VALIDATE_USER_NAME = 'validate'
    API_PAUSED = False
