import os
from setuptools import setup, find_namespace_packages
from setuptools.command.build_py import build_py as _build

CLASSIFIERS = [
    'Operating System :: POSIX',
    'Operating System :: MacOS :: MacOS X',
    'Intended Audience :: Science/Research',
    'Programming Language :: Python',
    'Programming Language :: Python :: 3',
    'Topic :: System :: Filesystems'
]

pkgdir = os.path.dirname(os.path.abspath(__file__))
srcdir = os.path.join(pkgdir, 'python')

def get_version():
    out = "dev"
    versfile = os.path.join(pkgdir, 'VERSION')
    if os.path.exists(versfile):
        with open(versfile) as fd:
            parts = fd.readline().split()
        if len(parts) > 0:
            out = parts[-1]
    else:
        out = "(unknown)"
    return out

def write_version_mod(version):
    smdir = os.path.join(srcdir, 'sciencemesh')
    for pkg in [f for f in os.listdir(smdir) \
                  if not f.startswith('_') and not f.startswith('.')
                     and os.path.isfile(os.path.join(smdir, f, "__init__.py"))]:
        versmodf = os.path.join(smdir, pkg, "version.py")
        with open(versmodf, 'w') as fd:
            fd.write('"""')
            fd.write("""
An identification of the subsystem version.  Note that this module file gets
(over-) written by the build process.
""")
            fd.write('"""\n\n')
            fd.write('__version__ = "')
            fd.write(version)
            fd.write('"\n')

class build(_build):

    def run(self):
        write_version_mod(get_version())
        _build.run(self)

setup(name='sciencemesh.storage',
      version=get_version(),
      description="sciencemesh.storage: a CS3 storage driver backed by Nextcloud",
      package_dir={'': 'python'},
      packages=find_namespace_packages(where='python', include=['sciencemesh.*']),
      install_requires=['requests', 'PyYAML', 'pyOpenSSL'],
      extras_require={'test': ['pytest']},
      entry_points={'console_scripts': ['ncfs = sciencemesh.cli.ncfs:run']},
      cmdclass={'build_py': build},
      classifiers=CLASSIFIERS,
      zip_safe=False
)
