"""ATM simulator: account ledger, snapshot storage and text menus."""
