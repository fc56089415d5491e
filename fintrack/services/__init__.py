"""
Services layer - business logic for the ledger and the AI assistance layer.
Routes stay thin; services own Firestore access and provider calls.
"""
