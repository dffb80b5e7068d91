"""Model registration module used by alembic autogeneration."""

from quiniela.models.db.award import Award, Prize  # noqa: F401
from quiniela.models.db.match import Match  # noqa: F401
from quiniela.models.db.pool import Competition, Pool, Registration, Season  # noqa: F401
from quiniela.models.db.prediction import Prediction  # noqa: F401
from quiniela.models.db.standings import CompetitionStandings  # noqa: F401
