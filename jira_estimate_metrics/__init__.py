"""Jira Estimate Metrics - estimate vs. actual effort statistics from JIRA data.

This package extracts story point estimates and logged effort from JIRA issues
and computes boxplot, scatterplot/trend line, histogram and deviation summary
data showing how well estimates predict effort.
"""
