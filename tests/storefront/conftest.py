import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()


@pytest.fixture(autouse=True)
def _reset_adapters():
    from storefront.notification.channel import reset_notifier
    from storefront.payment.gateway import reset_gateway

    reset_gateway()
    reset_notifier()
    yield
    reset_gateway()
    reset_notifier()


@pytest.fixture()
def fake_gateway():
    """A FakeGateway serving both MoMo and PayPal."""
    from storefront.payment.gateway import set_gateway
    from storefront.payment.gateway.fake_adapter import FakeGateway

    gateway = FakeGateway()
    set_gateway(gateway)
    return gateway


@pytest.fixture()
def notifier():
    from storefront.notification.channel import set_notifier
    from storefront.notification.channel.fake_notifier import FakeNotifier

    fake = FakeNotifier()
    set_notifier(fake)
    return fake


@pytest.fixture()
def stock():
    """Register products in the stock ledger: stock(product_id, total_stock, price)."""
    from storefront.inventory.management import RegisterProduct

    def _register(product_id, total_stock=10, price=10000.0):
        current_domain.process(
            RegisterProduct(product_id=product_id, total_stock=total_stock, price=price),
            asynchronous=False,
        )
        return product_id

    return _register


@pytest.fixture()
def voucher():
    """Create a voucher: voucher(code, discount_type, value, **options)."""
    from storefront.pricing.management import CreateVoucher

    def _create(code, discount_type, value, **options):
        return current_domain.process(
            CreateVoucher(code=code, discount_type=discount_type, value=value, **options),
            asynchronous=False,
        )

    return _create


@pytest.fixture()
def stock_level():
    """Current total_stock of a product."""
    from storefront.inventory.stock import ProductStock

    def _level(product_id):
        return current_domain.repository_for(ProductStock).get(product_id).total_stock

    return _level
