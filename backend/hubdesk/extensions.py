from flask_cors import CORS
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
migrate = Migrate()
# Origins come from CORS_ALLOW_ORIGINS at init_app time
cors = CORS()
