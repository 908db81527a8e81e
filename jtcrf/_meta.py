__author__ = 'Jtcrf developers'
__copyright__ = '2018, Jtcrf developers'
__license__ = 'MIT'
__version__ = '0.2.0'
