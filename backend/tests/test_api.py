def test_health(client):
    res = client.get('/api/health')
    assert res.status_code == 200
    assert res.get_json() == {'ok': True}


def test_unknown_room(client):
    res = client.get('/api/rooms/ZZZZ')
    assert res.status_code == 404
    assert res.get_json() == {'error': 'room_not_found'}


def test_room_snapshot(client, connect):
    h = connect('h')
    h.emit('HOST_LOBBY')
    code = [pkt['args'][0]['room'] for pkt in h.get_received() if pkt['name'] == 'HOSTED'][0]

    res = client.get(f'/api/rooms/{code.lower()}')
    assert res.status_code == 200
    state = res.get_json()
    assert state['code'] == code
    assert state['lobbyState'] == 'open'
    assert state['round'] == 0
    assert state['roundActive'] is False
    assert state['players'][0]['pid'] == 'h'
    assert state['players'][0]['isHost'] is True
    assert state['dateStarted'] is None


def test_history_starts_empty(client):
    res = client.get('/api/history')
    assert res.status_code == 200
    assert res.get_json() == {'games': []}


def test_no_static_assets_without_public_dir(client):
    assert client.get('/').status_code == 404


def test_static_assets_served(make_app, tmp_path):
    public = tmp_path / 'public'
    public.mkdir()
    (public / 'index.html').write_text('<h1>trivia</h1>')
    (public / 'client.js').write_text('// client')

    web = make_app(PUBLIC_DIR=str(public)).test_client()
    assert web.get('/').data == b'<h1>trivia</h1>'
    assert web.get('/client.js').data == b'// client'
    assert web.get('/missing.css').status_code == 404
    assert web.get('/api/health').status_code == 200
