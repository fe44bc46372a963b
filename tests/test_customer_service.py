import pytest
from pydantic import ValidationError

from pawnshop.core.exceptions import ConflictError, NotFoundError
from pawnshop.schemas.loan_schema import LoanStatus


def customer_payload(**overrides):
    payload = {"firstName": "Ravi", "lastName": "Kumar", "phone": "+91 98765 43210"}
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_customer_sanitizes_input(customer_service):
    customer = await customer_service.create_customer(
        customer_payload(firstName="<script>alert(1)</script>Ravi", email="")
    )

    assert customer.first_name == "Ravi"
    assert customer.email is None
    assert customer.id


@pytest.mark.asyncio
async def test_create_customer_rejects_unusable_phone(customer_service):
    with pytest.raises(ValidationError):
        await customer_service.create_customer(customer_payload(phone="call me"))


@pytest.mark.asyncio
async def test_create_customer_rejects_invalid_email(customer_service):
    with pytest.raises(ValidationError):
        await customer_service.create_customer(customer_payload(email="not-an-email"))


@pytest.mark.asyncio
async def test_list_customers_newest_first(customer_service):
    first = await customer_service.create_customer(customer_payload())
    second = await customer_service.create_customer(customer_payload(firstName="Meena"))

    customers = await customer_service.list_customers()

    assert [c.id for c in customers] == [second.id, first.id]


@pytest.mark.asyncio
async def test_update_customer_changes_only_given_fields(customer_service):
    customer = await customer_service.create_customer(customer_payload())

    updated = await customer_service.update_customer(customer.id, {"lastName": "Sharma"})

    assert updated.last_name == "Sharma"
    assert updated.first_name == "Ravi"
    assert updated.phone == customer.phone
    assert updated.updated_at >= customer.updated_at


@pytest.mark.asyncio
async def test_update_unknown_customer_fails(customer_service):
    with pytest.raises(NotFoundError):
        await customer_service.update_customer("missing", {"lastName": "Sharma"})


@pytest.mark.asyncio
async def test_delete_customer_with_active_loan_is_refused(customer_service, loan_service):
    customer = await customer_service.create_customer(customer_payload())
    await loan_service.create_loan({
        "customer_id": customer.id,
        "item_description": "Necklace",
        "principal": 1000,
        "interest_rate": 0.02,
    })

    with pytest.raises(ConflictError):
        await customer_service.delete_customer(customer.id)


@pytest.mark.asyncio
async def test_delete_customer_with_redeemed_loan_is_refused(customer_service, loan_service, repositories):
    customer = await customer_service.create_customer(customer_payload())
    loan = await loan_service.create_loan({
        "customer_id": customer.id,
        "item_description": "Necklace",
        "principal": 1000,
        "interest_rate": 0.02,
    })
    await loan_service.record_repayment({"loan_id": loan.id, "amount": loan.total_payable})
    assert (await repositories.loans.get_by_id(loan.id)).status == LoanStatus.redeemed

    with pytest.raises(ConflictError):
        await customer_service.delete_customer(customer.id)

    # Loan reads still resolve the customer
    loans = await loan_service.list_loans()
    assert [item.customer.id for item in loans] == [customer.id]


@pytest.mark.asyncio
async def test_delete_customer_without_loans(customer_service, repositories):
    customer = await customer_service.create_customer(customer_payload())

    await customer_service.delete_customer(customer.id)

    assert await repositories.customers.get_by_id(customer.id) is None
