# storefront/repos/coupon_repo.py
from sqlalchemy import select, update, or_
from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel


class CouponRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_code(self, code: str) -> CouponModel | None:
        return self.db.execute(
            select(CouponModel).where(CouponModel.code == code.strip().upper())
        ).scalar_one_or_none()

    def get_coupon(self, coupon_id: int) -> CouponModel | None:
        return self.db.get(CouponModel, coupon_id)

    def list_active(self) -> list[CouponModel]:
        return list(
            self.db.execute(
                select(CouponModel).where(CouponModel.is_active.is_(True))
            ).scalars().all()
        )

    def list_all(self) -> list[CouponModel]:
        return list(
            self.db.execute(
                select(CouponModel).order_by(CouponModel.created_at.desc(), CouponModel.id.desc())
            ).scalars().all()
        )

    def create_coupon(self, coupon: CouponModel) -> CouponModel:
        self.db.add(coupon)
        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def save(self, coupon: CouponModel) -> CouponModel:
        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def delete_coupon(self, coupon: CouponModel) -> None:
        self.db.delete(coupon)
        self.db.commit()

    def try_increment_usage(self, coupon_id: int) -> int:
        """
        Atomowy warunkowy inkrement: zwieksza used_count tylko gdy limit nie jest osiagniety.
        Zwraca liczbe zmienionych wierszy (0 = limit wyczerpany).
        """
        result = self.db.execute(
            update(CouponModel)
            .where(
                CouponModel.id == coupon_id,
                or_(
                    CouponModel.usage_limit.is_(None),
                    CouponModel.used_count < CouponModel.usage_limit,
                ),
            )
            .values(used_count=CouponModel.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount

    def refresh(self, coupon: CouponModel) -> CouponModel:
        self.db.refresh(coupon)
        return coupon

    def rollback(self) -> None:
        self.db.rollback()
