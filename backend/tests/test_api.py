def test_index(client):
    res = client.get('/')
    assert res.status_code == 201
    assert 'message' in res.get_json()


def test_list_rooms(client, app_registry):
    assert client.get('/api/rooms').get_json() == []
    code = app_registry.create_room()
    room = app_registry.get_room(code)
    room.game_started = True
    listing = client.get('/api/rooms').get_json()
    assert len(listing) == 1
    assert listing[0]['code'] == code
    assert listing[0]['playerCount'] == 0
    assert listing[0]['gameStarted'] is True


def test_get_room_state(sio_factory, client):
    host = sio_factory()
    alice = sio_factory()
    host.emit('create_room')
    code = host.get_received()[0]['args'][0]['roomCode']
    alice.emit('join_room', {'roomCode': code, 'playerName': 'Alice'})

    res = client.get(f'/api/rooms/{code}')
    assert res.status_code == 200
    state = res.get_json()
    assert state['code'] == code
    assert state['players'] == ['Alice']
    assert state['buzzOrder'] == []

    assert client.get('/api/rooms/NOPE00').status_code == 404


def test_delete_room_notifies_subscribers(sio_factory, client, app_registry):
    host = sio_factory()
    alice = sio_factory()
    host.emit('create_room')
    code = host.get_received()[0]['args'][0]['roomCode']
    alice.emit('join_room', {'roomCode': code, 'playerName': 'Alice'})
    host.get_received()
    alice.get_received()

    res = client.delete(f'/api/rooms/{code}')
    assert res.status_code == 200
    assert code not in app_registry
    received = alice.get_received()
    assert [(pkt['name'], pkt['args'][0]) for pkt in received] == [('room_closed', {'roomCode': code})]

    # Buzzing into a deleted room does nothing
    alice.emit('buzz', {'roomCode': code})
    assert alice.get_received() == []


def test_delete_unknown_room_is_404_without_broadcast(sio_factory, client):
    host = sio_factory()
    host.emit('create_room')
    host.get_received()
    res = client.delete('/api/rooms/NOPE00')
    assert res.status_code == 404
    assert 'error' in res.get_json()
    assert host.get_received() == []
