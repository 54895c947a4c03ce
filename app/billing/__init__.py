"""
Billing application.

Prepaid-balance billing for hotspot internet access. A user holds a wallet
balance on their Account; buying a Plan at a Location debits the wallet,
leases one pre-provisioned network credential, and appends a purchase
record carrying the computed expiry, all in one database transaction.

Subpackages:
    ledger: Account model and AccountLedger (balance reads, debit, credit)
    pool: CredentialLease model and CredentialPool (lease, release, disable)
    services: PurchaseOrchestrator and PurchaseRecordStore
    state_machines: Status and kind enums

Usage:
    from billing.services import PurchaseOrchestrator

    result = PurchaseOrchestrator.purchase(
        account_id=account.id,
        plan_id=plan.id,
        location_id=location.id,
        credential_id=credential.id,
        amount=plan.price,
        duration_hours=plan.duration_hours,
    )
"""
