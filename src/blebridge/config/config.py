"""
Module settings read from configobj files kept beside the module.

For the module `blebridge.server` the files are, from lowest to highest precedence, `server.default.cfg`,
`server.<os>.cfg`, `~/server.cfg` and `server.cfg`. Missing files are skipped. The merged settings are validated
against `server.schema.cfg`, and the values in the `[blebridge] [[server]]` section are assigned to the
attributes of the module that have the same names.
"""
import os
import platform

from configobj import ConfigObj, ConfigObjError, flatten_errors
from validate import Validator

config_extension = '.cfg'


def config_flavor(name, flavor=None):
    return name + '.' + flavor if flavor else name


def config_filename(name, directory):
    return os.path.join(directory, name + config_extension)


def os_name(system=None):
    """
    >>> os_name('Darwin')
    'osx'
    >>> os_name('Windows')
    'windows'
    """
    name = (system or platform.system()).lower()
    return 'osx' if name == 'darwin' else name


def user_config_directory():
    return os.path.expanduser('~')


def load_config_file_base(file, must_exist=True, schema=False) -> ConfigObj:
    """
    Loads one configuration file.
    :param must_exist: when False, a missing file loads as an empty configuration.
    :param schema:     load the file as a validation schema.
    :raises IOError: when the file must exist and does not.
    :raises ConfigObjError: when the file cannot be parsed. The message names the file.
    """
    options = {'list_values': False, '_inspec': True} if schema else {'interpolation': 'Template'}
    if not must_exist and not os.path.exists(file):
        return ConfigObj(**options)
    try:
        return ConfigObj(file, file_error=True, **options)
    except ConfigObjError as e:
        raise type(e)("%s at %s" % (e, file))


def config_files(name, directory) -> list:
    """ the files that make up a configuration, lowest precedence first """
    return [
        config_filename(config_flavor(name, 'default'), directory),
        config_filename(config_flavor(name, os_name()), directory),
        config_filename(name, user_config_directory()),
        config_filename(name, directory),
    ]


def load_config(name, directory) -> ConfigObj:
    """
    Merges the files of the named configuration and validates the result.
    :raises ConfigObjError: when a value fails validation. The message lists the failing paths.
    """
    config = ConfigObj()
    for file in config_files(name, directory):
        config.merge(load_config_file_base(file, must_exist=False))
    config.configspec = load_config_file_base(config_filename(config_flavor(name, 'schema'), directory),
                                              must_exist=False, schema=True)
    result = config.validate(Validator(), preserve_errors=True)
    if result is not True:
        failed = ['/'.join(sections + [key or '']) for sections, key, _ in flatten_errors(config, result)]
        raise ConfigObjError("the config file %s failed validation %s" % (name, ', '.join(failed)))
    return config


def fetch_conf_path(conf, path):
    """ the section reached by following the section names in path, or None when one is missing """
    for name in path:
        conf = conf.get(name)
        if conf is None:
            return None
    return conf


def apply_conf(conf, target):
    """ assigns each value to the target attribute of the same name. Names the target lacks are ignored. """
    for key, value in conf.items():
        if hasattr(target, key):
            setattr(target, key, value)


def module_name(module):
    """
    The dotted name of a module. A module run as __main__ is named from its package and file name.
    """
    if not module.__package__:
        raise ConfigObjError('module has no package defined')
    if module.__name__ != '__main__':
        return module.__name__
    return module.__package__ + '.' + os.path.splitext(os.path.basename(module.__file__))[0]


def configure_module(module, config_name=None):
    """
    Applies the configuration stored beside a module to the module's attributes.
    :param config_name: the configuration to load. Defaults to the last part of the module name.
    """
    name = module_name(module)
    config = load_config(config_name or name.rpartition('.')[2], os.path.dirname(module.__file__))
    section = fetch_conf_path(config, name.split('.'))
    if section:
        apply_conf(section, module)
