"""Navigator SecretConf Meta information.
   Navigator SecretConf persists configuration files with encrypted secret fields.
"""
__title__ = 'navigator_secretconf'
__description__ = (
   'Navigator SecretConf persists configuration files, keeping '
   'secret fields encrypted at rest.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/navigator-secretconf'
