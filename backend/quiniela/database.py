from databases import Database

from quiniela.config import config

database = Database(str(config.pg_dsn))
