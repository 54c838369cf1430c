from contextlib import contextmanager
from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@contextmanager
def atomic():
    """
    Run a block as one unit of work.

    Commits when the block finishes and rolls back every staged change
    if it raises, so an aborted operation leaves no trace in the database.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


class Game(db.Model):
    """Marker recording that a namespace has been initialized."""
    __tablename__ = 'games'

    id = db.Column(db.Integer, primary_key=True)
    namespace = db.Column(db.String(100), unique=True, nullable=False, index=True)
    owner = db.Column(db.String(66), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'namespace': self.namespace,
            'owner': self.owner,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Collection(db.Model):
    __tablename__ = 'collections'

    id = db.Column(db.Integer, primary_key=True)
    address = db.Column(db.String(66), unique=True, nullable=False, index=True)
    namespace = db.Column(db.String(100), nullable=False, index=True)
    kind = db.Column(db.String(20), nullable=False)  # 'ratings' or 'matches'
    owner = db.Column(db.String(66), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(500), nullable=False, default='')
    uri = db.Column(db.String(500), nullable=False, default='')
    royalty_bps = db.Column(db.Integer, nullable=True)
    supply = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint('namespace', 'kind', name='unique_registry_per_namespace'),
    )

    def to_dict(self):
        return {
            'address': self.address,
            'namespace': self.namespace,
            'kind': self.kind,
            'owner': self.owner,
            'name': self.name,
            'description': self.description,
            'uri': self.uri,
            'royalty_bps': self.royalty_bps,
            'supply': self.supply,
        }


class RatingRecord(db.Model):
    __tablename__ = 'rating_records'

    id = db.Column(db.Integer, primary_key=True)
    address = db.Column(db.String(66), unique=True, nullable=False, index=True)
    namespace = db.Column(db.String(100), nullable=False, index=True)
    collection_address = db.Column(db.String(66), db.ForeignKey('collections.address'), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    player = db.Column(db.String(66), nullable=False)
    owner = db.Column(db.String(66), nullable=False)
    transferable = db.Column(db.Boolean, nullable=False, default=False)
    score = db.Column(db.Integer, nullable=False)
    wins = db.Column(db.Integer, nullable=False, default=0)
    losses = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.UniqueConstraint('namespace', 'player', name='unique_rating_per_player'),
        db.CheckConstraint('score >= 0', name='non_negative_score'),
    )

    def to_tuple(self):
        return (self.score, self.wins, self.losses)

    def to_dict(self):
        return {
            'player': self.player,
            'address': self.address,
            'score': self.score,
            'wins': self.wins,
            'losses': self.losses,
        }


class Match(db.Model):
    __tablename__ = 'matches'

    id = db.Column(db.Integer, primary_key=True)
    address = db.Column(db.String(66), unique=True, nullable=False, index=True)
    namespace = db.Column(db.String(100), nullable=False, index=True)
    collection_address = db.Column(db.String(66), db.ForeignKey('collections.address'), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    owner = db.Column(db.String(66), nullable=False)
    transferable = db.Column(db.Boolean, nullable=False, default=False)
    teams = db.Column(db.JSON, nullable=False)
    outcome = db.Column(db.Integer, nullable=True)
    status = db.Column(db.String(20), nullable=False, default='open')  # open, resolved
    created_at = db.Column(db.DateTime, default=utcnow)
    resolved_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self):
        return {
            'address': self.address,
            'name': self.name,
            'teams': self.teams,
            'outcome': self.outcome,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'resolved_at': self.resolved_at.isoformat() if self.resolved_at else None,
        }


class RatingHistory(db.Model):
    __tablename__ = 'rating_history'

    id = db.Column(db.Integer, primary_key=True)
    namespace = db.Column(db.String(100), nullable=False, index=True)
    player = db.Column(db.String(66), nullable=False, index=True)
    match_address = db.Column(db.String(66), nullable=True)
    old_score = db.Column(db.Integer, nullable=False)
    new_score = db.Column(db.Integer, nullable=False)
    rating_change = db.Column(db.Integer, nullable=False)
    result = db.Column(db.String(10), nullable=False)  # 'win', 'loss'
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'player': self.player,
            'match': self.match_address,
            'old_score': self.old_score,
            'new_score': self.new_score,
            'rating_change': self.rating_change,
            'result': self.result,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
