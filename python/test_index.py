#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import io
import os
import tempfile
import unittest
import contextlib
from unittest import mock

from debian import deb822

import dpkg_version
import module_config
import module_index
import vercmp

PACKAGES = """\
Package: foo
Version: 1.0-1
Architecture: amd64

Package: foo
Version: 1.0-2
Architecture: amd64

Package: foo
Version: 1:0.9
Architecture: arm64

Package: bar
Version: 2.0~rc1
Architecture: all

Package: foo
Version: 1.0~beta-1
Architecture: amd64

Package: bar
Version: 2.0
Architecture: all
"""


def _stanza(package, version, arch='amd64'):
    return deb822.Packages({
        'Package': package, 'Version': version, 'Architecture': arch})


class TempDirTestCase(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def write(self, name, content):
        path = os.path.join(self.tmpdir.name, name)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        return path


class TestConfig(TempDirTestCase):

    def test_defaults(self):
        conf = module_config.load(None)
        self.assertEqual(conf, module_config.defaults)
        self.assertIsNot(conf, module_config.defaults)

    def test_load(self):
        path = self.write('vercmp.yml', 'log_level: debug\non_invalid: fail\n')
        conf = module_config.load(path)
        self.assertEqual(conf['log_level'], 'DEBUG')
        self.assertEqual(conf['on_invalid'], 'fail')
        self.assertEqual(conf['on_duplicate'], 'keep-first')

    def test_empty_file(self):
        path = self.write('vercmp.yml', '')
        self.assertEqual(module_config.load(path), module_config.defaults)

    def test_unknown_key(self):
        with self.assertLogs('CONF', 'WARNING'):
            conf = module_config.normalize({'colour': 'blue'})
        self.assertNotIn('colour', conf)

    def test_invalid(self):
        for conf in ({'log_level': 'LOUD'}, {'on_invalid': 'retry'},
                     {'on_duplicate': 'keep-last'}):
            with self.assertLogs('CONF', 'CRITICAL'):
                with self.assertRaises(SystemExit):
                    module_config.normalize(conf)

    def test_not_a_mapping(self):
        path = self.write('vercmp.yml', '- a\n- b\n')
        with self.assertLogs('CONF', 'CRITICAL'):
            with self.assertRaises(SystemExit):
                module_config.load(path)

    def test_missing_file(self):
        with self.assertLogs('CONF', 'CRITICAL'):
            with self.assertRaises(SystemExit):
                module_config.load(os.path.join(self.tmpdir.name, 'nope.yml'))


class TestIndex(TempDirTestCase):

    def test_newest(self):
        path = self.write('Packages', PACKAGES)
        paragraphs = module_index.read_packages(path)
        self.assertEqual(len(paragraphs), 6)
        result = module_index.newest_packages(paragraphs, module_config.load(None))
        self.assertEqual(
            [(p['Package'], p['Architecture'], p['Version']) for p in result],
            [('foo', 'amd64', '1.0-2'), ('foo', 'arm64', '1:0.9'),
             ('bar', 'all', '2.0')])

    def test_events(self):
        stanzas = [_stanza('foo', '1.0'), _stanza('foo', '1.1'),
                   _stanza('foo', '0.9')]
        conf = module_config.load(None)
        with self.assertLogs('INDEX', 'INFO') as cm:
            module_index.newest_packages(stanzas, conf)
        self.assertEqual([r.getMessage().split()[0] for r in cm.records],
                         ['NEW', 'NEWER', 'OLD'])

    def test_invalid_version(self):
        stanzas = [_stanza('foo', 'x1.0'), _stanza('foo', '1.0')]
        conf = module_config.load(None)
        with self.assertLogs('INDEX', 'ERROR'):
            result = module_index.newest_packages(stanzas, conf)
        self.assertEqual([p['Version'] for p in result], ['1.0'])
        conf['on_invalid'] = 'fail'
        with self.assertRaises(dpkg_version.VersionError):
            module_index.newest_packages(stanzas, conf)

    def test_duplicate(self):
        stanzas = [_stanza('foo', '1.0'), _stanza('foo', '0:1.0-0')]
        conf = module_config.load(None)
        with self.assertLogs('INDEX', 'ERROR'):
            result = module_index.newest_packages(stanzas, conf)
        self.assertEqual([p['Version'] for p in result], ['1.0'])
        conf['on_duplicate'] = 'fail'
        with self.assertRaises(module_index.DuplicateVersionError):
            module_index.newest_packages(stanzas, conf)

    def test_incomplete_stanza(self):
        stanzas = [deb822.Packages({'Package': 'foo'}), _stanza('bar', '1')]
        with self.assertLogs('INDEX', 'WARNING'):
            result = module_index.newest_packages(
                stanzas, module_config.load(None))
        self.assertEqual([p['Package'] for p in result], ['bar'])


class TestCli(TempDirTestCase):

    def run_cli(self, *argv):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            status = vercmp.main(list(argv))
        return status, out.getvalue()

    def test_compare(self):
        self.assertEqual(self.run_cli('compare', '1.0', 'lt', '1.1')[0], 0)
        self.assertEqual(self.run_cli('compare', '1.0', '>>', '1.1')[0], 1)
        self.assertEqual(self.run_cli('compare', '1:1.0', 'gt', '1.1')[0], 0)
        self.assertEqual(self.run_cli('compare', 'x', 'lt', '1.1')[0], 2)

    def test_check(self):
        status, out = self.run_cli('check', '1:1.0-1', '2.0')
        self.assertEqual(status, 0)
        self.assertEqual(out, '1:1.0-1\t1\t1.0\t1\n2.0\t\t2.0\t\n')
        self.assertEqual(self.run_cli('check', '1.0', '5:')[0], 2)

    def test_sort(self):
        status, out = self.run_cli('sort', '1.0', '1.0~rc1', '1:0.1', '1.0-1')
        self.assertEqual(status, 0)
        self.assertEqual(out.split(), ['1.0~rc1', '1.0', '1.0-1', '1:0.1'])
        status, out = self.run_cli('sort', '-r', '1.0', '1.0~rc1')
        self.assertEqual(out.split(), ['1.0', '1.0~rc1'])

    def test_newest(self):
        path = self.write('Packages', PACKAGES)
        status, out = self.run_cli('--log-level', 'error', 'newest', path)
        self.assertEqual(status, 0)
        versions = [p['Version'] for p in deb822.Packages.iter_paragraphs(
            io.StringIO(out), use_apt_pkg=False)]
        self.assertEqual(versions, ['1.0-2', '1:0.9', '2.0'])

    def test_newest_missing_file(self):
        self.assertEqual(self.run_cli('newest', os.path.join(
            self.tmpdir.name, 'Packages'))[0], 2)

    def test_logging_set_up_before_config(self):
        calls = []

        def load(path):
            calls.append('config')
            return module_config.normalize({})

        with mock.patch.object(vercmp.logging, 'basicConfig',
                               side_effect=lambda **kw: calls.append('logging')):
            with mock.patch.object(vercmp.module_config, 'load', side_effect=load):
                status, _ = self.run_cli('compare', '1.0', 'lt', '1.1')
        self.assertEqual(status, 0)
        self.assertEqual(calls, ['logging', 'config'])

    def test_bad_log_level(self):
        with self.assertLogs('CONF', 'CRITICAL'):
            with self.assertRaises(SystemExit) as cm:
                self.run_cli('--log-level', 'loud', 'compare', '1', 'lt', '2')
        self.assertEqual(cm.exception.code, 1)

    def test_config(self):
        path = self.write('vercmp.yml', 'on_duplicate: fail\n')
        packages = self.write('Packages', 'Package: a\nVersion: 1\n\n'
                                          'Package: a\nVersion: 1-0\n')
        self.assertEqual(self.run_cli('-c', path, 'newest', packages)[0], 2)


if __name__ == '__main__':
    unittest.main()
