"""
Task Estimator
Monte Carlo estimation of task lists

Simulates thousands of randomized task outcomes, accumulates them into
frequency histograms and reports median, standard deviation and likely
ranges for total time and cost.
"""

__version__ = "0.1.0"
__author__ = "Task Estimator Team"
