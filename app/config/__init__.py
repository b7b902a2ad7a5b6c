from app.config.settings import settings
