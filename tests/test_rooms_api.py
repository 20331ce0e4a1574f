def test_unknown_room_is_404(client):
    response = client.get("/rooms/nope")
    assert response.status_code == 404
    assert response.json()["detail"] == "Room not found"


def test_room_details_track_occupancy_and_ready_flags(client, registry):
    registry.join("abc", "a")
    registry.make_choice("abc", "a", "布")

    body = client.get("/rooms/abc").json()

    assert body["room_key"] == "abc"
    assert body["player_count"] == 1
    assert body["is_full"] is False
    assert body["players"] == [
        {"player_number": 1, "occupied": True, "ready": True},
        {"player_number": 2, "occupied": False, "ready": False},
    ]
    assert "布" not in client.get("/rooms/abc").text


def test_list_rooms(client, registry):
    assert client.get("/rooms").json() == []

    registry.join("abc", "a")
    registry.join("abc", "b")
    registry.join("xyz", "c")

    rooms = {room["room_key"]: room for room in client.get("/rooms").json()}
    assert set(rooms) == {"abc", "xyz"}
    assert rooms["abc"]["is_full"] is True
