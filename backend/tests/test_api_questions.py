"""
Test Planner - Question Bank API Tests
"""
import pytest
from httpx import AsyncClient


def question_payload(subtopic_id, **overrides):
    payload = {
        "subtopic_id": subtopic_id,
        "question_text": "What is 2 + 2?",
        "options": [
            {"option_text": "4", "is_correct": True},
            {"option_text": "5", "is_correct": False},
        ],
        "difficulty_level": 1,
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_teacher_creates_question(client: AsyncClient, headers_for, teacher, curriculum):
    subtopic = curriculum["subtopics"][0]

    response = await client.post(
        "/api/v1/questions",
        json=question_payload(subtopic.id),
        headers=headers_for(teacher),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["subtopic_id"] == str(subtopic.id)
    assert data["topic_id"] == str(subtopic.topic_id)
    assert data["created_by"] == str(teacher.id)
    assert data["options"][0] == {"option_text": "4", "is_correct": True}


@pytest.mark.asyncio
async def test_plain_options_with_correct_answer(client: AsyncClient, headers_for, teacher, curriculum):
    response = await client.post(
        "/api/v1/questions",
        json=question_payload(
            curriculum["subtopics"][0].id,
            options=["3", "4"],
            correct_answer="4",
        ),
        headers=headers_for(teacher),
    )
    assert response.status_code == 201
    assert response.json()["options"] == ["3", "4"]


@pytest.mark.asyncio
async def test_question_needs_an_answer(client: AsyncClient, headers_for, teacher, curriculum):
    response = await client.post(
        "/api/v1/questions",
        json=question_payload(curriculum["subtopics"][0].id, options=["3", "4"]),
        headers=headers_for(teacher),
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_subtopic(client: AsyncClient, headers_for, teacher, curriculum):
    response = await client.post(
        "/api/v1/questions",
        json=question_payload(999999),
        headers=headers_for(teacher),
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_students_cannot_author(client: AsyncClient, headers_for, student, curriculum):
    response = await client.post(
        "/api/v1/questions",
        json=question_payload(curriculum["subtopics"][0].id),
        headers=headers_for(student),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_difficulty_out_of_range(client: AsyncClient, headers_for, teacher, curriculum):
    response = await client.post(
        "/api/v1/questions",
        json=question_payload(curriculum["subtopics"][0].id, difficulty_level=6),
        headers=headers_for(teacher),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_bulk_create(client: AsyncClient, headers_for, teacher, curriculum):
    subtopic_id = curriculum["subtopics"][1].id

    response = await client.post(
        "/api/v1/questions/bulk",
        json={"questions": [
            question_payload(subtopic_id, question_text=f"Bulk {n}") for n in range(3)
        ]},
        headers=headers_for(teacher),
    )

    assert response.status_code == 201
    assert [q["question_text"] for q in response.json()] == ["Bulk 0", "Bulk 1", "Bulk 2"]


@pytest.mark.asyncio
async def test_list_is_paginated(client: AsyncClient, headers_for, student, question_bank):
    response = await client.get(
        "/api/v1/questions",
        params={"page": 2, "limit": 10},
        headers=headers_for(student),
    )

    assert response.status_code == 200
    data = response.json()
    assert len(data["data"]) == 10
    assert data["pagination"] == {"total": 24, "pages": 3, "current": 2, "per_page": 10}


@pytest.mark.asyncio
async def test_filter_by_topic_and_difficulty(client: AsyncClient, headers_for, student, curriculum, question_bank):
    topic = curriculum["topics"][1]

    response = await client.get(
        "/api/v1/questions/filter",
        params={"topic_id": str(topic.id), "difficulty": 2},
        headers=headers_for(student),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["pagination"]["total"] == 4
    assert all(q["topic_id"] == str(topic.id) and q["difficulty_level"] == 2 for q in data["data"])


@pytest.mark.asyncio
async def test_random_sample(client: AsyncClient, headers_for, student, curriculum, question_bank):
    subtopic = curriculum["subtopics"][0]

    response = await client.get(
        "/api/v1/questions/random",
        params={"count": 5, "subtopic_ids": [str(subtopic.id)]},
        headers=headers_for(student),
    )

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 5
    assert len({q["id"] for q in data}) == 5
    assert all(q["subtopic_id"] == str(subtopic.id) for q in data)


@pytest.mark.asyncio
async def test_only_creator_updates_and_deletes(client: AsyncClient, headers_for, teacher, admin, question_bank):
    question_id = question_bank[0].id

    denied = await client.put(
        f"/api/v1/questions/{question_id}",
        json={"question_text": "Changed"},
        headers=headers_for(admin),
    )
    assert denied.status_code == 403

    updated = await client.put(
        f"/api/v1/questions/{question_id}",
        json={"question_text": "Changed", "difficulty_level": 4},
        headers=headers_for(teacher),
    )
    assert updated.status_code == 200
    assert updated.json()["question_text"] == "Changed"
    assert updated.json()["difficulty_level"] == 4

    deleted = await client.delete(f"/api/v1/questions/{question_id}", headers=headers_for(teacher))
    assert deleted.status_code == 204

    gone = await client.get(f"/api/v1/questions/{question_id}", headers=headers_for(teacher))
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_deleted_question_cannot_be_changed(client: AsyncClient, headers_for, teacher, question_bank):
    question_id = question_bank[0].id
    headers = headers_for(teacher)

    deleted = await client.delete(f"/api/v1/questions/{question_id}", headers=headers)
    assert deleted.status_code == 204

    updated = await client.put(
        f"/api/v1/questions/{question_id}",
        json={"question_text": "Revived"},
        headers=headers,
    )
    assert updated.status_code == 404

    again = await client.delete(f"/api/v1/questions/{question_id}", headers=headers)
    assert again.status_code == 404
