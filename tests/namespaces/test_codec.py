import copy

import pytest

from vkcci.structs.namespaces import NAMESPACE_ANNOTATION, decode, encode, is_encoded


@pytest.fixture()
def pod():
    return {
        'apiVersion': 'v1',
        'kind': 'Pod',
        'metadata': {'name': 'myapp', 'namespace': 'default', 'labels': {'app': 'myapp'}},
        'spec': {'containers': [{'name': 'main', 'image': 'nginx'}]},
    }


def test_encoding_moves_the_pod_to_the_project(pod):
    encoded = encode(pod, 'proj-1')
    assert encoded['metadata']['namespace'] == 'proj-1'
    assert encoded['metadata']['annotations'] == {NAMESPACE_ANNOTATION: 'default'}
    assert encoded['spec'] == pod['spec']
    assert encoded['metadata']['labels'] == {'app': 'myapp'}


def test_encoding_keeps_other_annotations(pod):
    pod['metadata']['annotations'] = {'x': 'y'}
    encoded = encode(pod, 'proj-1')
    assert encoded['metadata']['annotations'] == {'x': 'y', NAMESPACE_ANNOTATION: 'default'}


def test_encoding_does_not_modify_the_original(pod):
    original = copy.deepcopy(pod)
    encode(pod, 'proj-1')
    assert pod == original


def test_encoding_is_idempotent(pod):
    once = encode(pod, 'proj-1')
    twice = encode(once, 'proj-1')
    assert twice == once
    assert twice['metadata']['annotations'][NAMESPACE_ANNOTATION] == 'default'


def test_encoding_without_namespace(pod):
    del pod['metadata']['namespace']
    encoded = encode(pod, 'proj-1')
    assert encoded['metadata']['namespace'] == 'proj-1'
    assert encoded['metadata']['annotations'] == {NAMESPACE_ANNOTATION: ''}


def test_encoding_without_metadata():
    encoded = encode({'spec': {}}, 'proj-1')
    assert encoded['metadata'] == {'namespace': 'proj-1', 'annotations': {NAMESPACE_ANNOTATION: ''}}


def test_decoding_restores_the_namespace(pod):
    decoded = decode(encode(pod, 'proj-1'))
    assert decoded['metadata']['namespace'] == 'default'
    assert NAMESPACE_ANNOTATION not in decoded['metadata'].get('annotations', {})


def test_round_trip_is_observationally_equal(pod):
    assert decode(encode(pod, 'proj-1')) == pod


def test_round_trip_keeps_other_annotations(pod):
    pod['metadata']['annotations'] = {'x': 'y'}
    decoded = decode(encode(pod, 'proj-1'))
    assert decoded['metadata']['annotations'] == {'x': 'y'}
    assert decoded['metadata']['namespace'] == 'default'


@pytest.mark.parametrize('namespace', ['default', 'kube-system', 'proj-1', 'a-very-long-namespace-name'])
def test_round_trip_for_any_namespace(pod, namespace):
    pod['metadata']['namespace'] = namespace
    decoded = decode(encode(pod, 'proj-1'))
    assert decoded['metadata']['namespace'] == namespace
    assert not is_encoded(decoded)


def test_decoding_does_not_modify_the_original(pod):
    encoded = encode(pod, 'proj-1')
    original = copy.deepcopy(encoded)
    decode(encoded)
    assert encoded == original


def test_decoding_without_marker_keeps_the_remote_namespace(pod):
    pod['metadata']['namespace'] = 'proj-1'
    decoded = decode(pod)
    assert decoded['metadata']['namespace'] == 'proj-1'
    assert decoded == pod


def test_decoding_without_metadata():
    assert decode({'spec': {}}) == {'spec': {}}


def test_marker_detection(pod):
    assert not is_encoded(pod)
    assert is_encoded(encode(pod, 'proj-1'))
    assert not is_encoded(decode(encode(pod, 'proj-1')))
