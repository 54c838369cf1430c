import logging
from typing import Optional, Type

from .addressing import collection_address, entity_address
from .errors import AlreadyExists, NotFound
from .models import db, Collection

logger = logging.getLogger(__name__)


class EntityFactory:
    """
    Mints addressable, ownable entities.

    Collections are owned by the namespace admin and addressed by
    ``(owner, collection name)``; entities inside them are addressed by
    ``(collection address, entity name)``. Nothing here commits: callers
    run the factory inside their own unit of work.
    """

    def get_collection(self, owner: str, collection_name: str) -> Optional[Collection]:
        return self.get_collection_at(collection_address(owner, collection_name))

    def get_collection_at(self, address: str) -> Optional[Collection]:
        return Collection.query.filter_by(address=address).first()

    def collection_exists(self, owner: str, collection_name: str) -> bool:
        return self.get_collection(owner, collection_name) is not None

    def entity_exists(self, entity_cls: Type[db.Model], address: str) -> bool:
        return entity_cls.query.filter_by(address=address).first() is not None

    def create_collection(
        self,
        capability,
        description: str,
        name: str,
        royalty_bps: Optional[int],
        uri: str,
        kind: str
    ) -> Collection:
        """Create a collection owned by the capability's account."""
        owner = capability.account
        address = collection_address(owner, name)

        if self.get_collection_at(address):
            raise AlreadyExists(f"Collection '{name}' already exists at {address}")

        collection = Collection(
            address=address,
            namespace=capability.namespace.name,
            kind=kind,
            owner=owner,
            name=name,
            description=description,
            uri=uri,
            royalty_bps=royalty_bps,
            supply=0
        )
        db.session.add(collection)
        db.session.flush()

        logger.debug(f"Created collection {name} at {address}")
        return collection

    def mint_entity(
        self,
        capability,
        collection_name: str,
        name: str,
        entity_cls: Type[db.Model],
        transferable: bool = False,
        **fields
    ):
        """
        Mint an entity named ``name`` into the namespace's collection.

        The entity is owned by the capability's account. Extra ``fields``
        are passed to the model constructor.
        """
        collection = self.get_collection(capability.namespace.owner, collection_name)
        if not collection:
            raise NotFound(f"Collection '{collection_name}' not found")

        address = entity_address(collection.address, name)
        if self.entity_exists(entity_cls, address):
            raise AlreadyExists(f"Entity '{name}' already exists at {address}")

        entity = entity_cls(
            address=address,
            namespace=collection.namespace,
            collection_address=collection.address,
            name=name,
            owner=capability.account,
            transferable=transferable,
            **fields
        )
        collection.supply += 1
        db.session.add(entity)
        db.session.flush()

        logger.debug(f"Minted {entity_cls.__name__} {name} at {address}")
        return entity
