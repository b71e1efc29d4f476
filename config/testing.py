from config.config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
REMINDER_ENABLED = False
UPLOAD_FOLDER = "/tmp/hr-records-test-uploads"
