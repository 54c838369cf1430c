from flask import Blueprint, current_app, jsonify, request

from ..errors import NotFound

bp = Blueprint('ratings', __name__, url_prefix='/api/v1/games')


def get_namespace(namespace: str):
    game = current_app.games.get(namespace)
    if not game:
        raise NotFound(f"Unknown game '{namespace}'")
    return game


# --- Routes ---

@bp.route('/<namespace>/registry')
def get_registry_address(namespace):
    game = get_namespace(namespace)
    return jsonify({
        'namespace': game.name,
        'owner': game.owner,
        'initialized': current_app.authority.is_initialized(game),
        'ratings': current_app.ratings.get_registry_address(game),
        'matches': current_app.matches.get_registry_address(game),
    })


@bp.route('/<namespace>/ratings/<player>')
def get_rating(namespace, player):
    game = get_namespace(namespace)
    record = current_app.ratings.get_record(game, player)
    if not record:
        raise NotFound(f"No rating for {player} in '{game.name}'")
    return jsonify(record.to_dict())


@bp.route('/<namespace>/ratings/<player>/exists')
def has_rating_record(namespace, player):
    game = get_namespace(namespace)
    record = current_app.ratings.get_record(game, player)
    return jsonify({
        'player': record.player if record else player,
        'has_record': record is not None
    })


@bp.route('/<namespace>/ratings/<player>/history')
def get_rating_history(namespace, player):
    game = get_namespace(namespace)
    limit = request.args.get('limit', 50, type=int)
    history = current_app.ratings.get_rating_history(game, player, limit=limit)
    return jsonify([row.to_dict() for row in history])


@bp.route('/<namespace>/matches')
def list_matches(namespace):
    game = get_namespace(namespace)
    status = request.args.get('status')
    limit = request.args.get('limit', 50, type=int)
    offset = request.args.get('offset', 0, type=int)

    matches = current_app.matches.list_matches(game, status=status, limit=limit, offset=offset)
    return jsonify({
        'matches': [m.to_dict() for m in matches],
        'count': len(matches),
        'limit': limit,
        'offset': offset
    })


@bp.route('/<namespace>/matches/<match_address>')
def get_match(namespace, match_address):
    game = get_namespace(namespace)
    match = current_app.matches.get_match_record(game, match_address)
    if not match:
        raise NotFound(f"Match {match_address} not found in '{game.name}'")
    return jsonify(match.to_dict())
