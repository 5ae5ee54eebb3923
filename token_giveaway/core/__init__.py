"""
Core domain exceptions shared by the ledger layer and the giveaway workflow.
"""
