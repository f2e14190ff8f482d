import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """
    Base configuration

    Values are kept as the raw environment strings; PaynowClient.from_config
    converts and validates them.
    """
    PAYNOW_INTEGRATION_ID = os.getenv('PAYNOW_INTEGRATION_ID')
    PAYNOW_INTEGRATION_KEY = os.getenv('PAYNOW_INTEGRATION_KEY')

    PAYNOW_BASE_URL = os.getenv('PAYNOW_BASE_URL', 'https://www.paynow.co.zw/interface/')
    PAYNOW_TIMEOUT = os.getenv('PAYNOW_TIMEOUT', '30')

    # Defaults for payments that don't set their own
    PAYNOW_RETURN_URL = os.getenv('PAYNOW_RETURN_URL')
    PAYNOW_RESULT_URL = os.getenv('PAYNOW_RESULT_URL')

    PAYNOW_LOG_LEVEL = os.getenv('PAYNOW_LOG_LEVEL', 'INFO')
    PAYNOW_LOG_DIR = os.getenv('PAYNOW_LOG_DIR')


class DevelopmentConfig(Config):
    """Development configuration"""
    PAYNOW_LOG_LEVEL = os.getenv('PAYNOW_LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration"""


class TestingConfig(Config):
    """Testing configuration"""
    PAYNOW_INTEGRATION_ID = '1201'
    PAYNOW_INTEGRATION_KEY = '3e9fed89-60e1-4ce5-ab6e-6b1eb2d4f977'
    PAYNOW_BASE_URL = 'https://paynow.test/interface/'
    PAYNOW_TIMEOUT = '30'
    PAYNOW_RETURN_URL = 'https://merchant.test/return'
    PAYNOW_RESULT_URL = 'https://merchant.test/result'
    PAYNOW_LOG_DIR = None


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
