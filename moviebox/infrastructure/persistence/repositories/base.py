"""
Socle commun des repositories SQLModel asynchrones.

Regroupe les primitives partagees par tous les agregats :
- lecture par ID (rafraichie depuis la base)
- insertion/mise a jour avec traduction des violations d'unicite en ConflictError
- increments atomiques (popularite) et integration d'une note en une seule requete
- ajout/retrait avec semantique d'ensemble dans les listes JSON
- pagination triee
"""

from typing import Any, ClassVar, Generic, Optional, TypeVar

from sqlalchemy import case, delete, func, text, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from moviebox.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from moviebox.core.value_objects.pagination import PageRequest, SortOrder
from moviebox.infrastructure.persistence.models import utcnow

M = TypeVar("M", bound=SQLModel)


class SQLModelRepository(Generic[M]):
    """
    Repository de base lie a la session de l'unite de travail.

    Les sous-classes declarent le modele, le nom d'entite (messages d'erreur),
    les champs triables et les champs proteges contre update() : compteurs et
    listes de references, qui ne changent que par operations dediees.
    """

    model: ClassVar[type[SQLModel]]
    entity_name: ClassVar[str]
    sortable_fields: ClassVar[frozenset[str]] = frozenset({"popularity"})
    protected_fields: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session asynchrone de l'unite de travail
        """
        self._session = session

    async def _get_model(self, entity_id: str) -> Optional[M]:
        statement = (
            select(self.model)
            .where(self.model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        return (await self._session.exec(statement)).first()

    async def _all(self, statement) -> list[M]:
        result = await self._session.exec(statement.execution_options(populate_existing=True))
        return list(result.all())

    async def _run(self, statement) -> int:
        """Execute une requete UPDATE/DELETE dans la transaction courante."""
        connection = await self._session.connection()
        result = await connection.execute(statement)
        return result.rowcount

    async def exists(self, entity_id: str) -> bool:
        statement = select(self.model.id).where(self.model.id == entity_id)
        return (await self._session.exec(statement)).first() is not None

    async def delete(self, entity_id: str) -> bool:
        return await self._run(delete(self.model).where(self.model.id == entity_id)) > 0

    async def _flush(self, conflict_message: str) -> None:
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise ConflictError(conflict_message) from exc

    async def _insert(self, model: M, conflict_message: str) -> M:
        self._session.add(model)
        await self._flush(conflict_message)
        return model

    async def _update_from(self, entity_id: str, fresh: M, conflict_message: str) -> M:
        """
        Recopie les champs modifiables de `fresh` sur la ligne existante.

        Raises :
            NotFoundError : si la ligne n'existe pas
            ConflictError : si la mise a jour viole une contrainte d'unicite
        """
        model = await self._get_model(entity_id)
        if model is None:
            raise NotFoundError(self.entity_name, entity_id)

        excluded = set(self.protected_fields) | {"id", "created_at", "updated_at"}
        for key, value in fresh.model_dump(exclude=excluded).items():
            setattr(model, key, value)
        model.updated_at = utcnow()
        self._session.add(model)
        await self._flush(conflict_message)
        return model

    async def _increment(self, entity_id: str, field_name: str, delta: float) -> None:
        column = getattr(self.model, field_name)
        await self._run(
            update(self.model)
            .where(self.model.id == entity_id)
            .values({field_name: column + delta})
        )

    async def _integrate_rating(
        self,
        entity_id: str,
        rating: float,
        average_field: str = "average_rating",
        count_field: str = "rating_count",
    ) -> Optional[M]:
        """
        Integre une note : count+1 et moyenne incrementale dans la meme requete.

        avg' = (avg * count + r) / (count + 1)

        Une note egale a la moyenne courante laisse la moyenne inchangee : k
        notes identiques donnent exactement cette note, sans derive flottante.
        """
        average = getattr(self.model, average_field)
        count = getattr(self.model, count_field)
        updated = await self._run(
            update(self.model)
            .where(self.model.id == entity_id)
            .values(
                {
                    average_field: case(
                        (average == rating, average),
                        else_=(average * count + rating) / (count + 1),
                    ),
                    count_field: count + 1,
                }
            )
        )
        if not updated:
            return None
        return await self._get_model(entity_id)

    async def _add_to_set(self, entity_id: str, field_name: str, value: str) -> bool:
        """
        Ajoute `value` a la liste JSON si absente. Retourne True si ajoute.

        Test d'appartenance et ecriture tiennent dans une seule requete UPDATE
        conditionnelle.
        """
        statement = text(_append_if_absent_sql(self.model.__tablename__, field_name))
        return await self._run(statement.bindparams(id=entity_id, value=value)) > 0

    async def _remove_from_set(self, entity_id: str, field_name: str, value: str) -> bool:
        """Retire `value` de la liste JSON (UPDATE conditionnel). Retourne True si retire."""
        statement = text(_remove_if_present_sql(self.model.__tablename__, field_name))
        return await self._run(statement.bindparams(id=entity_id, value=value)) > 0

    def _ordering(self, sort_by: str, descending: bool) -> tuple[Any, Any]:
        if sort_by not in self.sortable_fields:
            raise InvalidArgumentError(
                f"Invalid sort field: {sort_by}. Must be one of: "
                f"{', '.join(sorted(self.sortable_fields))}"
            )
        column = getattr(self.model, sort_by)
        return (column.desc() if descending else column.asc(), self.model.id.asc())

    async def _paginate(self, statement, request: PageRequest) -> tuple[list[M], int]:
        """Retourne (lignes de la page, total avant pagination)."""
        ordering = self._ordering(request.sort_by, request.sort_order == SortOrder.DESC)
        count_statement = select(func.count()).select_from(statement.subquery())
        total = (await self._session.exec(count_statement)).one()
        page_statement = (
            statement.order_by(*ordering).offset(request.offset).limit(request.limit)
        )
        return await self._all(page_statement), total

    async def _top(self, statement, limit: int, sort_by: str = "popularity") -> list[M]:
        return await self._all(statement.order_by(*self._ordering(sort_by, True)).limit(limit))


def _member_sql(table: str, column: str) -> str:
    return (
        f"SELECT 1 FROM json_each(coalesce({table}.{column}, '[]')) AS member "
        "WHERE member.value = :value"
    )


def _append_if_absent_sql(table: str, column: str) -> str:
    """UPDATE ajoutant :value en fin de liste, sans effet si deja present."""
    return (
        f"UPDATE {table} SET {column} = json_insert(coalesce({column}, '[]'), '$[#]', :value) "
        f"WHERE id = :id AND NOT EXISTS ({_member_sql(table, column)})"
    )


def _remove_if_present_sql(table: str, column: str) -> str:
    """UPDATE retirant :value (ordre des autres elements conserve)."""
    return (
        f"UPDATE {table} SET {column} = json_remove({column}, "
        f"(SELECT member.fullkey FROM json_each({table}.{column}) AS member "
        "WHERE member.value = :value LIMIT 1)) "
        f"WHERE id = :id AND EXISTS ({_member_sql(table, column)})"
    )


def json_member(column, value: str):
    """Clause 'la liste JSON contient exactement cette valeur'."""
    return column.contains(f'"{value}"')
