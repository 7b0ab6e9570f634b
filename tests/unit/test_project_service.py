"""Tests for ProjectService."""
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId


NOW = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)


def _mock_db():
    mock_db = MagicMock()
    mock_projects = AsyncMock()
    mock_db.__getitem__.return_value = mock_projects
    return mock_db, mock_projects


def _project_doc(**overrides):
    doc = {
        "_id": ObjectId(),
        "user_id": "user123",
        "name": "Website redesign",
        "description": None,
        "color": "#007BFF",
        "is_active": True,
        "created_at": NOW,
        "updated_at": NOW,
    }
    doc.update(overrides)
    return doc


@pytest.mark.asyncio
class TestProjectServiceCreate:
    """Tests for project creation."""

    async def test_create_project_success(self):
        """Test creating a project stores owner, defaults and timestamps."""
        from timetracker.models.project import ProjectCreate
        from timetracker.services.project_service import ProjectService

        mock_db, mock_projects = _mock_db()
        mock_projects.insert_one.return_value = MagicMock(inserted_id=ObjectId())

        service = ProjectService(mock_db, clock=lambda: NOW)
        project = await service.create_project(
            user_id="user123",
            project_create=ProjectCreate(name="Website redesign"),
        )

        assert project.name == "Website redesign"
        assert project.color == "#007BFF"
        assert project.is_active is True
        assert project.user_id == "user123"
        assert project.created_at == NOW

        insert_call = mock_projects.insert_one.call_args[0][0]
        assert insert_call["user_id"] == "user123"
        assert insert_call["is_active"] is True


@pytest.mark.asyncio
class TestProjectServiceGet:
    """Tests for project retrieval."""

    async def test_get_project_success(self):
        from timetracker.services.project_service import ProjectService

        mock_db, mock_projects = _mock_db()
        doc = _project_doc()
        mock_projects.find_one.return_value = doc

        service = ProjectService(mock_db)
        project = await service.get_project(user_id="user123", project_id=str(doc["_id"]))

        assert project.id == str(doc["_id"])
        query = mock_projects.find_one.call_args[0][0]
        assert query == {"user_id": "user123", "_id": doc["_id"], "is_active": True}

    async def test_get_project_include_inactive(self):
        """Test include_inactive drops the active-flag filter."""
        from timetracker.services.project_service import ProjectService

        mock_db, mock_projects = _mock_db()
        doc = _project_doc(is_active=False)
        mock_projects.find_one.return_value = doc

        service = ProjectService(mock_db)
        project = await service.get_project(
            user_id="user123",
            project_id=str(doc["_id"]),
            include_inactive=True,
        )

        assert project.is_active is False
        query = mock_projects.find_one.call_args[0][0]
        assert "is_active" not in query

    async def test_get_project_not_found(self):
        from timetracker.exceptions import NotFoundError
        from timetracker.services.project_service import ProjectService

        mock_db, mock_projects = _mock_db()
        mock_projects.find_one.return_value = None

        service = ProjectService(mock_db)

        with pytest.raises(NotFoundError, match="Project not found"):
            await service.get_project(user_id="user123", project_id=str(ObjectId()))

    async def test_get_project_malformed_id(self):
        from timetracker.exceptions import NotFoundError
        from timetracker.services.project_service import ProjectService

        mock_db, mock_projects = _mock_db()
        service = ProjectService(mock_db)

        with pytest.raises(NotFoundError):
            await service.get_project(user_id="user123", project_id="website")

        mock_projects.find_one.assert_not_called()


@pytest.mark.asyncio
class TestProjectServiceUpdate:
    """Tests for project updates."""

    async def test_update_project_patch(self):
        """Test only supplied fields are written."""
        from timetracker.models.project import ProjectUpdate
        from timetracker.services.project_service import ProjectService

        mock_db, mock_projects = _mock_db()
        doc = _project_doc()
        mock_projects.find_one_and_update.return_value = {**doc, "color": "#FF5733"}

        service = ProjectService(mock_db, clock=lambda: NOW)
        project = await service.update_project(
            user_id="user123",
            project_id=str(doc["_id"]),
            project_update=ProjectUpdate(color="#FF5733"),
        )

        assert project.color == "#FF5733"
        update_doc = mock_projects.find_one_and_update.call_args[0][1]["$set"]
        assert update_doc == {"color": "#FF5733", "updated_at": NOW}

    async def test_update_project_not_found(self):
        from timetracker.exceptions import NotFoundError
        from timetracker.models.project import ProjectUpdate
        from timetracker.services.project_service import ProjectService

        mock_db, mock_projects = _mock_db()
        mock_projects.find_one_and_update.return_value = None

        service = ProjectService(mock_db)

        with pytest.raises(NotFoundError):
            await service.update_project(
                user_id="user123",
                project_id=str(ObjectId()),
                project_update=ProjectUpdate(name="Renamed"),
            )


@pytest.mark.asyncio
class TestProjectServiceDelete:
    """Tests for project soft deletion."""

    async def test_delete_project_soft_deletes(self):
        """Test delete flips is_active instead of removing the document."""
        from timetracker.services.project_service import ProjectService

        mock_db, mock_projects = _mock_db()
        doc = _project_doc()
        mock_projects.update_one.return_value = MagicMock(matched_count=1, modified_count=1)

        service = ProjectService(mock_db, clock=lambda: NOW)
        await service.delete_project(user_id="user123", project_id=str(doc["_id"]))

        query, update = mock_projects.update_one.call_args[0]
        assert query["is_active"] is True
        assert update == {"$set": {"is_active": False, "updated_at": NOW}}
        mock_projects.delete_one.assert_not_called()

    async def test_delete_project_twice(self, fake_db, clock):
        """Test deleting an already deleted project is NotFoundError."""
        from timetracker.exceptions import NotFoundError
        from timetracker.models.project import ProjectCreate
        from timetracker.services.project_service import ProjectService

        service = ProjectService(fake_db, clock=clock)
        project = await service.create_project("user123", ProjectCreate(name="Docs"))

        await service.delete_project("user123", project.id)
        with pytest.raises(NotFoundError):
            await service.delete_project("user123", project.id)

    async def test_restore_project(self, fake_db, clock):
        """Test is_active=True brings a deleted project back."""
        from timetracker.models.project import ProjectCreate, ProjectUpdate
        from timetracker.services.project_service import ProjectService

        service = ProjectService(fake_db, clock=clock)
        project = await service.create_project("user123", ProjectCreate(name="Docs"))
        await service.delete_project("user123", project.id)

        restored = await service.update_project(
            "user123", project.id, ProjectUpdate(is_active=True)
        )

        assert restored.is_active is True
        assert (await service.get_project("user123", project.id)).name == "Docs"

    async def test_delete_other_users_project(self, fake_db, clock):
        """Test a user cannot delete someone else's project."""
        from timetracker.exceptions import NotFoundError
        from timetracker.models.project import ProjectCreate
        from timetracker.services.project_service import ProjectService

        service = ProjectService(fake_db, clock=clock)
        project = await service.create_project("owner", ProjectCreate(name="Docs"))

        with pytest.raises(NotFoundError):
            await service.delete_project("intruder", project.id)

        assert (await service.get_project("owner", project.id)).is_active is True
