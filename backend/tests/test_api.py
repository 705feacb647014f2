from pixelboard.models import PixelCooldown, Placement


def test_get_empty_canvas(client):
    res = client.get('/api/pixel-canvas')
    assert res.status_code == 200
    data = res.get_json()
    canvas = data['canvas']
    assert canvas['width'] == 200
    assert canvas['height'] == 200
    assert len(canvas['grid']) == 200
    assert all(len(row) == 200 for row in canvas['grid'])
    assert all(color is None for row in canvas['grid'] for color in row)
    assert canvas['totalPixels'] == 0
    assert canvas['uniqueUsers'] == 0
    assert canvas['lastUpdated'] is None
    assert data['stats']['canvasSize'] == '200x200'


def test_register_login_and_me(client):
    res = client.post('/register', json={'username': 'alice', 'password': 'pw'})
    assert res.status_code == 201
    client.post('/logout')
    assert client.get('/me').get_json()['authenticated'] is False

    assert client.post('/login', json={'username': 'alice', 'password': 'nope'}).status_code == 401
    res = client.post('/login', json={'username': 'alice', 'password': 'pw'})
    assert res.status_code == 200
    me = client.get('/me').get_json()
    assert me['authenticated'] is True
    assert me['user']['username'] == 'alice'


def test_first_placement_shows_on_grid(make_user_client):
    u1 = make_user_client('u1')
    res = u1.post('/api/pixel-canvas/place', json={'x': 10, 'y': 10, 'color': '#FF0000'})
    assert res.status_code == 201
    body = res.get_json()
    assert body['success'] is True
    assert body['placement']['userId'] == u1.user['id']
    assert body['placement']['username'] == 'u1'

    canvas = u1.get('/api/pixel-canvas').get_json()['canvas']
    assert canvas['grid'][10][10] == '#FF0000'
    assert canvas['totalPixels'] == 1
    assert canvas['uniqueUsers'] == 1
    assert canvas['lastUpdated'] is not None


def test_second_placement_within_cooldown_is_rejected(make_user_client):
    u1 = make_user_client('u1')
    assert u1.post('/api/pixel-canvas/place', json={'x': 10, 'y': 10, 'color': '#FF0000'}).status_code == 201

    res = u1.post('/api/pixel-canvas/place', json={'x': 11, 'y': 11, 'color': '#00FF00'})
    assert res.status_code == 429
    body = res.get_json()
    assert body['success'] is False
    assert body['error'] == 'on_cooldown'
    assert 0 < body['remainingCooldown'] <= 30
    assert 'second' in body['message']

    canvas = u1.get('/api/pixel-canvas').get_json()['canvas']
    assert canvas['grid'][11][11] is None
    assert canvas['totalPixels'] == 1


def test_unauthenticated_placement_is_rejected(client, flask_app):
    res = client.post('/api/pixel-canvas/place', json={
        'x': 1, 'y': 1, 'color': '#000000', 'userId': 'ghost', 'username': 'ghost',
    })
    assert res.status_code == 401
    assert res.get_json()['error'] == 'unauthenticated'

    canvas = client.get('/api/pixel-canvas').get_json()['canvas']
    assert canvas['grid'][1][1] is None
    assert PixelCooldown.query.count() == 0
    assert Placement.query.count() == 0


def test_mismatched_user_id_is_rejected(make_user_client):
    u1 = make_user_client('u1')
    res = u1.post('/api/pixel-canvas/place', json={
        'x': 1, 'y': 1, 'color': '#000000', 'userId': 'someone-else',
    })
    assert res.status_code == 401
    assert Placement.query.count() == 0


def test_out_of_bounds_does_not_start_cooldown(make_user_client):
    u1 = make_user_client('u1')
    for x, y in [(200, 5), (5, 200), (-1, 0), (0, -1), ('3', 4), (None, None)]:
        res = u1.post('/api/pixel-canvas/place', json={'x': x, 'y': y, 'color': '#123456'})
        assert res.status_code == 400
        assert res.get_json()['error'] == 'out_of_bounds'

    # Failed attempts leave the user idle
    assert u1.post('/api/pixel-canvas/place', json={'x': 0, 'y': 0, 'color': '#123456'}).status_code == 201


def test_invalid_color_is_rejected(make_user_client):
    u1 = make_user_client('u1')
    for color in ['red', '#FFF', '#GGGGGG', 'FF0000', None, 123]:
        res = u1.post('/api/pixel-canvas/place', json={'x': 3, 'y': 3, 'color': color})
        assert res.status_code == 400
        assert res.get_json()['error'] == 'invalid_color'
    assert u1.get('/api/pixel-canvas').get_json()['canvas']['grid'][3][3] is None


def test_non_object_json_bodies_are_rejected(make_user_client, client):
    assert client.post('/register', json=['u1', 'pw']).status_code == 400
    assert client.post('/login', json=['u1', 'pw']).status_code == 401
    assert client.post('/api/pixel-canvas/place', json=[1, 2, '#000000']).status_code == 401

    u1 = make_user_client('u1')
    res = u1.post('/api/pixel-canvas/place', json=[1, 2, '#000000'])
    assert res.status_code == 400
    assert res.get_json()['error'] == 'out_of_bounds'


def test_lowercase_color_is_stored_as_submitted(make_user_client):
    u1 = make_user_client('u1')
    res = u1.post('/api/pixel-canvas/place', json={'x': 2, 'y': 2, 'color': '#abcdef'})
    assert res.status_code == 201
    assert res.get_json()['placement']['color'] == '#abcdef'
    assert u1.get('/api/pixel-canvas').get_json()['canvas']['grid'][2][2] == '#abcdef'


def test_cooldown_endpoint(make_user_client, client):
    assert client.get('/api/pixel-canvas/cooldown').status_code == 400

    res = client.get('/api/pixel-canvas/cooldown?userId=nobody')
    assert res.get_json() == {'success': True, 'onCooldown': False, 'remainingSeconds': 0}

    u1 = make_user_client('u1')
    u1.post('/api/pixel-canvas/place', json={'x': 0, 'y': 0, 'color': '#000000'})
    status = client.get(f"/api/pixel-canvas/cooldown?userId={u1.user['id']}").get_json()
    assert status['onCooldown'] is True
    assert 0 < status['remainingSeconds'] <= 30


def test_two_users_share_unique_count(make_user_client):
    u1 = make_user_client('u1')
    u2 = make_user_client('u2')
    u1.post('/api/pixel-canvas/place', json={'x': 5, 'y': 5, 'color': '#111111'})
    u2.post('/api/pixel-canvas/place', json={'x': 5, 'y': 5, 'color': '#222222'})

    canvas = u1.get('/api/pixel-canvas').get_json()['canvas']
    # Last write wins, but u1 still counts as a contributor
    assert canvas['grid'][5][5] == '#222222'
    assert canvas['totalPixels'] == 2
    assert canvas['uniqueUsers'] == 2


def test_cell_provenance(make_user_client, client):
    u1 = make_user_client('u1')
    u1.post('/api/pixel-canvas/place', json={'x': 7, 'y': 8, 'color': '#00FF00'})

    cell = client.get('/api/pixel-canvas/cell?x=7&y=8').get_json()['cell']
    assert cell['color'] == '#00FF00'
    assert cell['placedByName'] == 'u1'
    assert cell['placedBy'] == u1.user['id']

    assert client.get('/api/pixel-canvas/cell?x=1&y=1').get_json()['cell'] is None
    assert client.get('/api/pixel-canvas/cell?x=999&y=1').status_code == 400


def test_snapshot_requires_cron_secret(client):
    assert client.post('/api/pixel-canvas/snapshot').status_code == 401
    res = client.get('/api/cron/weekly-canvas-snapshot', headers={'Authorization': 'Bearer wrong'})
    assert res.status_code == 401


def test_cron_snapshot_is_idempotent(client):
    auth = {'Authorization': 'Bearer test-cron-secret'}
    assert client.get('/api/pixel-canvas/snapshot').get_json()['snapshot'] is None

    first = client.post('/api/cron/weekly-canvas-snapshot', headers=auth)
    assert first.status_code == 201
    assert first.get_json()['created'] is True

    second = client.post('/api/pixel-canvas/snapshot', headers=auth)
    assert second.status_code == 200
    assert second.get_json()['created'] is False

    snapshot = client.get('/api/pixel-canvas/snapshot').get_json()['snapshot']
    assert snapshot['week'] == first.get_json()['snapshot']['week']
    assert snapshot['width'] == 200
    assert snapshot['imageSvg'].startswith('<svg')


def test_first_placement_of_the_week_captures_snapshot(make_user_client, client):
    u1 = make_user_client('u1')
    u1.post('/api/pixel-canvas/place', json={'x': 4, 'y': 4, 'color': '#0000FF'})

    snapshot = client.get('/api/pixel-canvas/snapshot').get_json()['snapshot']
    assert snapshot is not None
    assert snapshot['grid'][4][4] == '#0000FF'
    assert snapshot['totalPixels'] == 1
