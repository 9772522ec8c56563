"""Aggregation core: data models, calculators and collaborator interfaces"""
