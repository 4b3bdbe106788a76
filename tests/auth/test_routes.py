import pytest
from fastapi import status

from online_judge.business.services import decode_token
from online_judge.data.schemas import ResultCode


async def issue_code(client, mail_client, email):
    response = await client.post("/api/v1/auth/send-email-code", json={"email": email})
    assert response.status_code == status.HTTP_200_OK
    return mail_client.last_code(email)


# Test user registration
@pytest.mark.asyncio
async def test_register_success(client, mail_client):
    code = await issue_code(client, mail_client, "newuser@example.com")
    user_data = {
        "username": "newuser",
        "password": "password123",
        "email": "newuser@example.com",
        "code": code,
    }

    # Make request
    response = await client.post("/api/v1/auth/register", json=user_data)

    # Check response
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["code"] == ResultCode.SUCCESS
    assert decode_token(data["data"]["token"])["sub"] == "newuser"


@pytest.mark.asyncio
async def test_register_existing_username(client, mail_client, registered_user):
    code = await issue_code(client, mail_client, "other@example.com")
    user_data = {
        "username": registered_user["username"],
        "password": "password123",
        "email": "other@example.com",
        "code": code,
    }

    response = await client.post("/api/v1/auth/register", json=user_data)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == ResultCode.USERNAME_ALREADY_EXISTS


@pytest.mark.asyncio
async def test_register_wrong_code(client, mail_client):
    code = await issue_code(client, mail_client, "newuser@example.com")
    wrong = "0" * len(code) if code != "0" * len(code) else "1" * len(code)

    response = await client.post(
        "/api/v1/auth/register",
        json={"username": "newuser", "password": "pw", "email": "newuser@example.com", "code": wrong},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == ResultCode.CODE_MISMATCH


@pytest.mark.asyncio
async def test_register_missing_fields(client):
    response = await client.post("/api/v1/auth/register", json={"username": "newuser"})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# Test user login
@pytest.mark.asyncio
async def test_login_success(client, mail_client, registered_user):
    code = await issue_code(client, mail_client, registered_user["email"])

    response = await client.post(
        "/api/v1/auth/login",
        json={**registered_user, "code": code},
    )

    assert response.status_code == status.HTTP_200_OK
    assert decode_token(response.json()["data"]["token"])["sub"] == "alice"


@pytest.mark.asyncio
async def test_login_wrong_password(client, mail_client, registered_user):
    code = await issue_code(client, mail_client, registered_user["email"])

    response = await client.post(
        "/api/v1/auth/login",
        json={**registered_user, "password": "wrongpassword", "code": code},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == ResultCode.WRONG_PASSWORD


@pytest.mark.asyncio
async def test_login_nonexistent_user(client, mail_client):
    code = await issue_code(client, mail_client, "ghost@example.com")

    response = await client.post(
        "/api/v1/auth/login",
        json={"username": "ghost", "password": "password123", "email": "ghost@example.com", "code": code},
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["code"] == ResultCode.USERNAME_NOT_FOUND


# Email verification codes
@pytest.mark.asyncio
async def test_send_email_code_invalid_format(client, mail_client):
    response = await client.post("/api/v1/auth/send-email-code", json={"email": "nope"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == ResultCode.INVALID_EMAIL_FORMAT
    assert mail_client.sent == []


@pytest.mark.asyncio
async def test_send_email_code_delivery_failure_is_generic(client, mail_client):
    mail_client.fail = True

    response = await client.post("/api/v1/auth/send-email-code", json={"email": "a@example.com"})

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    body = response.json()
    assert body == {"detail": "Internal server error"}
    assert "SMTP" not in response.text


# Picture challenges
@pytest.mark.asyncio
async def test_picture_code_flow(client, mock_redis):
    response = await client.post("/api/v1/auth/send-code", json={"username": "alice"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["image"].startswith("data:image/png;base64,")

    answer = mock_redis.answer("picture_code:alice")
    response = await client.post(
        "/api/v1/auth/check-picture-code", json={"username": "alice", "code": answer}
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["code"] == ResultCode.SUCCESS


@pytest.mark.asyncio
async def test_picture_code_mismatch(client, mock_redis):
    await client.post("/api/v1/auth/send-code", json={"username": "alice"})
    answer = mock_redis.answer("picture_code:alice")

    response = await client.post(
        "/api/v1/auth/check-picture-code", json={"username": "alice", "code": answer + "X"}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == ResultCode.CODE_MISMATCH


@pytest.mark.asyncio
async def test_picture_code_expired(client, clock, mock_redis):
    await client.post("/api/v1/auth/send-code", json={"username": "alice"})
    answer = mock_redis.answer("picture_code:alice")
    clock.advance(10 * 60)

    response = await client.post(
        "/api/v1/auth/check-picture-code", json={"username": "alice", "code": answer}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == ResultCode.CODE_EXPIRED


@pytest.mark.asyncio
async def test_user_id_lookup(client, registered_user):
    response = await client.post("/api/v1/auth/user-id", json={"username": "alice"})
    missing = await client.post("/api/v1/auth/user-id", json={"username": "nobody"})

    assert response.status_code == status.HTTP_200_OK
    assert isinstance(response.json()["data"]["user_id"], int)
    assert missing.status_code == status.HTTP_404_NOT_FOUND


# Account maintenance
@pytest.mark.asyncio
async def test_get_user_detail(client, registered_user):
    user_id = (await client.post("/api/v1/auth/user-id", json={"username": "alice"})).json()["data"]["user_id"]

    response = await client.get(f"/api/v1/users/{user_id}")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["username"] == "alice"
    assert data["email"] == "alice@example.com"
    assert data["role"] == "user"
    assert "password_hash" not in data


@pytest.mark.asyncio
async def test_get_unknown_user(client):
    response = await client.get("/api/v1/users/12345")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["code"] == ResultCode.USER_NOT_FOUND


@pytest.mark.asyncio
async def test_update_password_then_login(client, mail_client, registered_user):
    user_id = (await client.post("/api/v1/auth/user-id", json={"username": "alice"})).json()["data"]["user_id"]

    response = await client.put(f"/api/v1/users/{user_id}", json={"password": "newpassword"})
    assert response.status_code == status.HTTP_200_OK

    code = await issue_code(client, mail_client, "alice@example.com")
    response = await client.post(
        "/api/v1/auth/login",
        json={**registered_user, "password": "newpassword", "code": code},
    )
    assert response.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_delete_user(client, registered_user):
    user_id = (await client.post("/api/v1/auth/user-id", json={"username": "alice"})).json()["data"]["user_id"]

    response = await client.delete(f"/api/v1/users/{user_id}")
    assert response.status_code == status.HTTP_200_OK

    response = await client.get(f"/api/v1/users/{user_id}")
    assert response.status_code == status.HTTP_404_NOT_FOUND
