"""Record storage"""
