from alembic.config import Config
from alembic import command
import os

_INI = os.path.join(os.path.dirname(__file__), '..', 'alembic.ini')


def _config(database_url: str | None = None) -> Config:
    cfg = Config(_INI)
    cfg.set_main_option('script_location', os.path.join(os.path.dirname(_INI), 'alembic'))
    url = database_url or os.getenv('DATABASE_URL')
    if url:
        cfg.set_main_option('sqlalchemy.url', url)
    return cfg


def upgrade_head(database_url: str | None = None):
    # programmatically run `alembic upgrade head`
    command.upgrade(_config(database_url), 'head')


def downgrade_base(database_url: str | None = None):
    command.downgrade(_config(database_url), 'base')
