"""
Base repository pattern implementation.

Repositories wrap a SQLAlchemy session and translate driver failures into
``RepositoryError`` so that callers above the storage layer only ever see
one error family for infrastructure faults.
"""

from abc import ABC
from typing import TypeVar, Generic, List, Optional, Dict, Any, Type
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

T = TypeVar('T')

# SQLSTATE for unique_violation on PostgreSQL
UNIQUE_VIOLATION = "23505"


class RepositoryError(Exception):
    """Base exception for repository operations."""
    pass


class DuplicateError(RepositoryError):
    """Exception raised when a write violates a unique constraint."""

    def __init__(self, entity_type: str, criteria: Dict[str, Any]):
        super().__init__(f"{entity_type} already exists with criteria: {criteria}")
        self.entity_type = entity_type
        self.criteria = criteria


def is_unique_violation(error: IntegrityError) -> bool:
    """True when ``error`` comes from a unique constraint rather than NOT NULL, FK or CHECK."""
    if getattr(error.orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    return "unique" in str(error.orig).lower()


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common database operations.

    Subclasses pass their model class and may declare ``unique_keys`` so a
    ``DuplicateError`` reports the colliding columns instead of the whole row.
    """

    unique_keys: tuple = ()

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model

    def _filtered(self, criteria: Dict[str, Any]):
        query = self.db.query(self.model)
        for key, value in criteria.items():
            if hasattr(self.model, key):
                query = query.filter(getattr(self.model, key) == value)
        return query

    def get_by_id_optional(self, entity_id: Any) -> Optional[T]:
        if entity_id is None:
            return None
        try:
            return self.db.query(self.model).filter(self.model.id == entity_id).first()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to load {self.model.__name__}: {str(e)}") from e

    def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        **filters
    ) -> List[T]:
        query = self._filtered(filters)
        if offset is not None:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        try:
            return query.all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to list {self.model.__name__}: {str(e)}") from e

    def find_by(self, **criteria) -> List[T]:
        try:
            return self._filtered(criteria).all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to query {self.model.__name__}: {str(e)}") from e

    def find_one_by(self, **criteria) -> Optional[T]:
        try:
            return self._filtered(criteria).first()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to query {self.model.__name__}: {str(e)}") from e

    def exists_by(self, **criteria) -> bool:
        return self.count(**criteria) > 0

    def count(self, **criteria) -> int:
        try:
            return self._filtered(criteria).count()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to count {self.model.__name__}: {str(e)}") from e

    def create(self, entity: T) -> T:
        """
        Insert a new entity and commit.

        Raises:
            DuplicateError: If entity violates unique constraints
            RepositoryError: If database operation fails
        """
        try:
            self.db.add(entity)
            self.db.commit()
            self.db.refresh(entity)
            return entity
        except IntegrityError as e:
            raise self._integrity_error(entity, e, "create") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Failed to create {self.model.__name__}: {str(e)}") from e

    def update(self, entity: T, updates: Dict[str, Any]) -> T:
        """Apply ``updates`` to an already loaded entity and commit."""
        for key, value in updates.items():
            if hasattr(entity, key):
                setattr(entity, key, value)
        return self.save(entity)

    def save(self, entity: T) -> T:
        try:
            self.db.commit()
            self.db.refresh(entity)
            return entity
        except IntegrityError as e:
            raise self._integrity_error(entity, e, "update") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Failed to update {self.model.__name__}: {str(e)}") from e

    def delete(self, entity: T) -> bool:
        try:
            self.db.delete(entity)
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Failed to delete {self.model.__name__}: {str(e)}") from e

    def _integrity_error(self, entity: T, error: IntegrityError, action: str) -> RepositoryError:
        criteria = self._unique_criteria(entity)
        self.db.rollback()
        if is_unique_violation(error):
            return DuplicateError(self.model.__name__, criteria)
        return RepositoryError(f"Failed to {action} {self.model.__name__}: {str(error.orig)}")

    def _unique_criteria(self, entity: T) -> Dict[str, Any]:
        keys = self.unique_keys or ("id",)
        return {key: getattr(entity, key, None) for key in keys}
