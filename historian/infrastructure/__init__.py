"""Infrastructure - settings, database, model access"""
