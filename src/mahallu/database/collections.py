"""Collection names used in the document store."""

BLOCKS = "blocks"
CLUSTERS = "clusters"
MEMBERS = "members"
TRANSACTIONS = "transactions"
ADMIN_TRANSACTIONS = "adminTransactions"
BANK_TRANSACTIONS = "bankTransactions"

ALL_COLLECTIONS = (
    BLOCKS,
    CLUSTERS,
    MEMBERS,
    TRANSACTIONS,
    ADMIN_TRANSACTIONS,
    BANK_TRANSACTIONS,
)
