"""
Flask web application for the Championship Scheduler.

JSON endpoints that run the scheduling operations against the YAML store in
DATA_DIR. Teams, groups and phases are maintained in that store by the
organizers; these endpoints only generate and progress matches.
"""
import os
import logging
from datetime import datetime
from flask import Flask, request, jsonify
from championship.errors import InvalidTransitionError, NotFoundError, PersistenceError, ValidationError
from championship.repository import YamlRepository
from championship.service import Scheduler
from championship.settings import ScheduleConfig, get_data_dir, load_settings

app = Flask(__name__)

DATA_DIR = get_data_dir()

if not app.debug:
    app.logger.setLevel(logging.INFO)


def get_scheduler() -> Scheduler:
    """Scheduler bound to the YAML store in DATA_DIR."""
    return Scheduler(YamlRepository(DATA_DIR))


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _schedule_config(data: dict) -> ScheduleConfig:
    """Request values layered over settings.yaml."""
    return ScheduleConfig.from_dict({
        'start_date': data.get('start_date'),
        'start_time': data.get('start_time'),
        'match_interval_minutes': data.get('match_interval_minutes'),
        'matches_per_day': data.get('matches_per_day'),
        'double_round_robin': data.get('double_round_robin'),
    }, defaults=load_settings(DATA_DIR))


@app.errorhandler(ValidationError)
def handle_validation_error(e):
    return jsonify({'error': str(e)}), 400


@app.errorhandler(NotFoundError)
def handle_not_found(e):
    return jsonify({'error': str(e)}), 404


@app.errorhandler(InvalidTransitionError)
def handle_invalid_transition(e):
    return jsonify({'error': str(e), 'current': e.current, 'requested': e.requested}), 409


@app.errorhandler(PersistenceError)
def handle_persistence_error(e):
    app.logger.error(f'Store failure after {len(e.inserted)} insert(s): {e}')
    return jsonify({
        'error': str(e),
        'inserted': len(e.inserted),
        'inserted_ids': [m.id for m in e.inserted],
    }), 500


@app.route('/api/schedule/preview', methods=['POST'])
def api_schedule_preview():
    """Match count and days needed for the selected groups."""
    data = _json_body()
    group_ids = data.get('group_ids') or []
    if not group_ids:
        raise ValidationError('Select at least one group')
    return jsonify(get_scheduler().preview(group_ids, _schedule_config(data)))


@app.route('/api/schedule/groups', methods=['POST'])
def api_schedule_groups():
    """Generate and store round-robin matches for the selected groups."""
    data = _json_body()
    config = _schedule_config(data)
    result = get_scheduler().schedule_groups(
        data.get('championship_id'),
        data.get('group_ids') or [],
        config,
        phase_id=data.get('phase_id') or None,
    )
    app.logger.info(f'Scheduled {len(result.matches)} matches starting {config.start.isoformat()}')
    return jsonify({
        'success': True,
        'created': len(result.matches),
        'skipped_groups': result.skipped_groups,
        'matches': [m.to_dict() for m in result.matches],
    })


@app.route('/api/bracket/generate', methods=['POST'])
def api_generate_bracket():
    """Store a single elimination bracket for a phase."""
    data = _json_body()
    matches = get_scheduler().generate_bracket(
        data.get('championship_id'),
        data.get('phase_id'),
        team_ids=data.get('team_ids'),
    )
    total_rounds = max(m.round for m in matches) if matches else 0
    app.logger.info(f'Generated bracket with {len(matches)} slots over {total_rounds} rounds')
    return jsonify({
        'success': True,
        'created': len(matches),
        'total_rounds': total_rounds,
    })


@app.route('/api/bracket/winner', methods=['POST'])
def api_bracket_winner():
    """Record the winner (team1 or team2) of an elimination match."""
    data = _json_body()
    if not data.get('match_id') or not data.get('winner'):
        raise ValidationError('Missing match_id or winner')
    updated = get_scheduler().record_winner(data['match_id'], data['winner'])
    return jsonify({
        'success': True,
        'updated': [m.to_dict() for m in updated],
    })


@app.route('/api/phases/<phase_id>/bracket')
def api_phase_bracket(phase_id):
    return jsonify(get_scheduler().get_bracket(phase_id))


@app.route('/api/matches', methods=['POST'])
def api_create_match():
    """Create a single match picked by the organizer."""
    data = _json_body()
    scheduled_at = data.get('scheduled_at')
    if scheduled_at:
        try:
            scheduled_at = datetime.fromisoformat(scheduled_at)
        except (TypeError, ValueError):
            raise ValidationError(f'Invalid scheduled_at: {scheduled_at}')
    match = get_scheduler().create_match(
        data.get('championship_id'),
        data.get('phase_id'),
        data.get('team1_id'),
        data.get('team2_id'),
        round=data.get('round'),
        position=data.get('position'),
        scheduled_at=scheduled_at or None,
        group_id=data.get('group_id'),
    )
    return jsonify({'success': True, 'match': match.to_dict()}), 201


@app.route('/api/matches/<match_id>/status', methods=['POST'])
def api_match_status(match_id):
    data = _json_body()
    if not data.get('status'):
        raise ValidationError('Missing status')
    match = get_scheduler().update_match_status(match_id, data['status'])
    return jsonify({'success': True, 'match': match.to_dict()})


@app.route('/api/phases/<phase_id>/status', methods=['POST'])
def api_phase_status(phase_id):
    data = _json_body()
    if not data.get('status'):
        raise ValidationError('Missing status')
    phase = get_scheduler().update_phase_status(phase_id, data['status'])
    return jsonify({'success': True, 'phase': phase.to_dict()})


@app.route('/api/phases/<phase_id>/stats')
def api_phase_stats(phase_id):
    return jsonify(get_scheduler().get_phase_stats(phase_id))


if __name__ == '__main__':
    app.run(debug=os.environ.get('FLASK_DEBUG') == '1', port=int(os.environ.get('PORT', 5000)))
