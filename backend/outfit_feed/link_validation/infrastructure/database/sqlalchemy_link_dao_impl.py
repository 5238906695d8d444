from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from outfit_feed.shared.db_manager import db_session
from .models import ProductLinkModel
from .i_link_dao import ILinkDao


class SqlAlchemyLinkDaoImpl(ILinkDao):
    """
    SQLAlchemy implementation of ILinkDao
    """

    def __init__(self, session: Session = None):
        """
        :param session: Optional session for testing, otherwise uses global scoped session
        """
        self._session = session if session else db_session

    def create_link(self, link: ProductLinkModel) -> None:
        try:
            self._session.add(link)
            self._session.commit()
        except Exception as e:
            self._session.rollback()
            raise e

    def get_link_by_id(self, link_id: str) -> Optional[ProductLinkModel]:
        return self._session.query(ProductLinkModel).filter(ProductLinkModel.id == link_id).first()

    def update_link(self, link_id: str, values: dict) -> Optional[ProductLinkModel]:
        values = dict(values)
        values.setdefault("updated_at", datetime.now())
        try:
            updated = (
                self._session.query(ProductLinkModel)
                .filter(ProductLinkModel.id == link_id)
                .update(values, synchronize_session=False)
            )
            self._session.commit()
        except Exception as e:
            self._session.rollback()
            raise e

        if not updated:
            return None
        # commit expired the identity map, so this reloads the fresh row
        return self.get_link_by_id(link_id)

    def get_links_by_status(self, status: str) -> List[ProductLinkModel]:
        return (
            self._session.query(ProductLinkModel)
            .filter(ProductLinkModel.status == status)
            .order_by(ProductLinkModel.created_at.asc())
            .all()
        )

    def get_links_by_outfit_id(self, outfit_id: str) -> List[ProductLinkModel]:
        return (
            self._session.query(ProductLinkModel)
            .filter(ProductLinkModel.outfit_id == outfit_id)
            .order_by(ProductLinkModel.created_at.asc())
            .all()
        )

    def count_by_status(self) -> Dict[str, int]:
        rows = (
            self._session.query(ProductLinkModel.status, func.count(ProductLinkModel.id))
            .group_by(ProductLinkModel.status)
            .all()
        )
        return {status: count for status, count in rows}
