"""D818 online ordering: checkout, payment reconciliation and notifications."""
