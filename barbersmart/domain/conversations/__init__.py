"""Conversations domain - Short-lived chat context kept in Redis"""
