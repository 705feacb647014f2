from typing import Optional

from flask import Blueprint, jsonify, request, current_app
from flask_login import current_user
from pixelboard import socketio
from pixelboard.services.canvas import (
    CooldownGate,
    GridStore,
    Identity,
    OutOfBounds,
    PlacementService,
    SnapshotFailure,
    SnapshotScheduler,
    Unauthenticated,
)


canvas = Blueprint('canvas', __name__)


def _request_identity(data) -> Optional[Identity]:
    """Identity comes from the login session; body fields must agree with it."""
    identity = Identity.from_user(current_user)
    claimed = data.get('userId')
    if identity is not None and claimed is not None and str(claimed) != identity.id:
        current_app.logger.warning(f"[place] session user={identity.id} claimed userId={claimed}")
        return None
    return identity


def _cron_authorized() -> bool:
    expected = f"Bearer {current_app.config.get('CRON_SECRET')}"
    return request.headers.get('Authorization') == expected


@canvas.route('/pixel-canvas', methods=['GET'])
def get_canvas():
    store = GridStore.from_config(current_app.config)
    state = store.get_grid()
    return jsonify({
        'success': True,
        'canvas': state.to_dict(),
        'stats': store.stats(),
    })


@canvas.route('/pixel-canvas/place', methods=['POST'])
def place_pixel():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    service = PlacementService.from_config(current_app.config, snapshots=SnapshotScheduler())
    result = service.place(
        data.get('x'),
        data.get('y'),
        data.get('color'),
        _request_identity(data),
    )
    if not result.ok:
        return jsonify(result.to_dict()), result.error.status_code

    payload = result.to_dict()
    socketio.emit('pixel_placed', payload['placement'], to='canvas', namespace='/ws')
    return jsonify(payload), 201


@canvas.route('/pixel-canvas/cooldown', methods=['GET'])
def get_cooldown():
    user_id = request.args.get('userId')
    if not user_id:
        return jsonify({'error': 'User ID is required'}), 400
    status = CooldownGate.from_config(current_app.config).check_cooldown(user_id)
    payload = status.to_dict()
    payload['success'] = True
    return jsonify(payload)


@canvas.route('/pixel-canvas/cell', methods=['GET'])
def get_cell():
    x = request.args.get('x', type=int)
    y = request.args.get('y', type=int)
    try:
        info = GridStore.from_config(current_app.config).cell_info(x, y)
    except OutOfBounds as exc:
        return jsonify(exc.to_dict()), exc.status_code
    return jsonify({'success': True, 'cell': info})


@canvas.route('/pixel-canvas/snapshot', methods=['GET'])
def get_snapshot():
    scheduler = SnapshotScheduler()
    snapshot = scheduler.latest_for_display()
    if snapshot is None:
        return jsonify({
            'success': True,
            'snapshot': None,
            'message': f"No snapshot available for week {scheduler.period_id()}",
        })
    return jsonify({'success': True, 'snapshot': snapshot.to_dict()})


@canvas.route('/pixel-canvas/snapshot', methods=['POST'])
def trigger_snapshot():
    if not _cron_authorized():
        return jsonify(Unauthenticated('Unauthorized').to_dict()), 401
    return _take_weekly_snapshot()


@canvas.route('/cron/weekly-canvas-snapshot', methods=['GET', 'POST'])
def cron_weekly_snapshot():
    if not _cron_authorized():
        current_app.logger.warning('[snapshot-cron] unauthorized trigger attempt')
        return jsonify(Unauthenticated('Unauthorized').to_dict()), 401
    return _take_weekly_snapshot()


def _take_weekly_snapshot():
    scheduler = SnapshotScheduler()
    period = scheduler.period_id()
    store = GridStore.from_config(current_app.config)
    try:
        snapshot = scheduler.take_snapshot(store.get_grid())
    except SnapshotFailure as exc:
        current_app.logger.error(f"[snapshot-cron] {exc}")
        return jsonify(exc.to_dict()), exc.status_code
    if snapshot is None:
        return jsonify({
            'success': True,
            'created': False,
            'message': f"Weekly snapshot for week {period} already exists",
        })
    return jsonify({
        'success': True,
        'created': True,
        'message': f"Weekly snapshot saved for week {period}",
        'snapshot': snapshot.to_dict(include_grid=False),
    }), 201
