"""Test the signed-in user's family member CRUD."""

from datetime import timedelta

import pytest

from conftest import auth_headers, create_user
from swasthya.config import settings
from swasthya.features.appointments.time_utils import local_now
from swasthya.features.family.models import FamilyMember, FamilyRelation


URL = "/api/patient/family-members"


@pytest.fixture
async def user(database):
    return await create_user(name="Ram Bahadur Thapa", email="ram@example.com")


async def add(client, user, **fields):
    payload = {"name": "Gita Thapa", "relation": "SPOUSE"}
    payload.update(fields)
    return await client.post(URL, json=payload, headers=auth_headers(user))


async def test_create_and_list(client, user):
    created = await add(
        client,
        user,
        date_of_birth="1990-04-12",
        gender="female",
        blood_group="B+",
        phone="98 0123 4567",
    )
    await add(client, user, name="Aarav Thapa", relation="CHILD")

    assert created.status_code == 201
    body = created.json()
    assert body["success"] is True
    member = body["family_member"]
    assert (member["name"], member["relation"], member["blood_group"]) == ("Gita Thapa", "SPOUSE", "B+")
    assert member["phone"] == "9801234567"

    listed = await client.get(URL, headers=auth_headers(user))
    assert listed.status_code == 200
    assert [m["name"] for m in listed.json()["family_members"]] == ["Gita Thapa", "Aarav Thapa"]


@pytest.mark.parametrize(
    "fields, message",
    [
        ({"name": "  "}, "Name is required"),
        ({"relation": None}, "Relation is required"),
        ({"relation": "COUSIN"}, "Invalid relation. Must be one of: SELF, SPOUSE, CHILD, PARENT, SIBLING, OTHER"),
        ({"gender": "unknown"}, "Invalid gender. Must be one of: male, female, other"),
        ({"blood_group": "C+"}, "Invalid blood group. Must be one of: A+, A-, B+, B-, AB+, AB-, O+, O-"),
        ({"phone": "0123456789"}, "Invalid phone number format. Must be 10 digits starting with 98 or 97."),
        ({"date_of_birth": "12/04/1990"}, "Invalid date_of_birth format"),
    ],
)
async def test_create_rejects_bad_fields(client, user, fields, message):
    response = await add(client, user, **fields)

    assert response.status_code == 400
    assert response.json() == {"error": message}


async def test_date_of_birth_cannot_be_in_the_future(client, user):
    tomorrow = (local_now().date() + timedelta(days=1)).isoformat()

    response = await add(client, user, date_of_birth=tomorrow)

    assert response.json() == {"error": "Date of birth cannot be in the future"}


async def test_member_limit(client, user):
    for i in range(settings.MAX_FAMILY_MEMBERS):
        await FamilyMember(user_id=str(user.id), name=f"Member {i}", relation=FamilyRelation.OTHER).insert()

    response = await add(client, user)

    assert response.status_code == 400
    assert response.json() == {"error": f"Maximum of {settings.MAX_FAMILY_MEMBERS} family members allowed"}


async def test_partial_update_and_clearing(client, user):
    member_id = (await add(client, user, gender="female", blood_group="B+")).json()["family_member"]["id"]

    response = await client.put(
        f"{URL}/{member_id}",
        json={"name": "Gita Kumari Thapa", "blood_group": None},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    member = response.json()["family_member"]
    assert member["name"] == "Gita Kumari Thapa"
    assert member["blood_group"] is None
    assert member["gender"] == "female"
    assert member["relation"] == "SPOUSE"


async def test_update_errors(client, user):
    member_id = (await add(client, user)).json()["family_member"]["id"]
    headers = auth_headers(user)

    empty = await client.put(f"{URL}/{member_id}", json={}, headers=headers)
    assert empty.status_code == 400
    assert empty.json() == {"error": "No fields to update"}

    blank_name = await client.put(f"{URL}/{member_id}", json={"name": ""}, headers=headers)
    assert blank_name.json() == {"error": "Name cannot be empty"}


async def test_members_are_private_to_their_owner(client, user):
    member_id = (await add(client, user)).json()["family_member"]["id"]
    other = await create_user(name="Hari Karki", email="hari@example.com")
    headers = auth_headers(other)

    for response in [
        await client.get(f"{URL}/{member_id}", headers=headers),
        await client.put(f"{URL}/{member_id}", json={"name": "Someone"}, headers=headers),
        await client.delete(f"{URL}/{member_id}", headers=headers),
    ]:
        assert response.status_code == 404
        assert response.json() == {"error": "Family member not found"}

    assert (await client.get(URL, headers=headers)).json() == {"family_members": []}


async def test_get_and_delete(client, user):
    member_id = (await add(client, user)).json()["family_member"]["id"]
    headers = auth_headers(user)

    fetched = await client.get(f"{URL}/{member_id}", headers=headers)
    assert fetched.json()["family_member"]["name"] == "Gita Thapa"

    deleted = await client.delete(f"{URL}/{member_id}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json()["success"] is True

    missing = await client.get(f"{URL}/{member_id}", headers=headers)
    assert missing.status_code == 404


async def test_requires_sign_in(client, database):
    response = await client.get(URL)

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
