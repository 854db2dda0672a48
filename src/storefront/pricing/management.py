"""Voucher management: commands and handler, plus the lookup used at checkout."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import VoucherInvalid
from storefront.pricing.voucher import Voucher, VoucherType, normalize_code

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Voucher")
class CreateVoucher:
    code = String(required=True, max_length=50)
    discount_type = String(required=True, choices=VoucherType)
    value = Float(required=True)
    max_discount = Float()
    min_order_amount = Float(default=0.0)
    expired_at = DateTime()


@storefront.command(part_of="Voucher")
class DeactivateVoucher:
    code = String(required=True, max_length=50)


@storefront.command_handler(part_of=Voucher)
class VoucherCommandHandler:
    @handle(CreateVoucher)
    def create_voucher(self, command):
        repo = current_domain.repository_for(Voucher)
        code = normalize_code(command.code)
        if repo._dao.query.filter(code=code).all().items:
            raise ValidationError({"code": [f"Voucher {code} already exists"]})

        voucher = Voucher.create(
            code=code,
            discount_type=command.discount_type,
            value=command.value,
            max_discount=command.max_discount,
            min_order_amount=command.min_order_amount,
            expired_at=command.expired_at,
        )
        repo.add(voucher)
        logger.info("Voucher created", code=code, discount_type=command.discount_type)
        return code

    @handle(DeactivateVoucher)
    def deactivate_voucher(self, command):
        repo = current_domain.repository_for(Voucher)
        voucher = repo.get(normalize_code(command.code))
        voucher.deactivate()
        repo.add(voucher)
        logger.info("Voucher deactivated", code=voucher.code)


def find_voucher(code: str) -> Voucher:
    """Load a voucher by its case-insensitive code, or raise VoucherInvalid."""
    try:
        return current_domain.repository_for(Voucher).get(normalize_code(code))
    except ObjectNotFoundError:
        raise VoucherInvalid("Voucher is invalid or has expired", voucher_code=normalize_code(code))
