# alien_rfid/core/reader.py

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from alien_rfid.protocols import constants as alien_const
from alien_rfid.protocols import framing
from alien_rfid.protocols import settings as alien_settings
from alien_rfid.protocols.settings import Access, Setting, SettingSpec
from alien_rfid.protocols.taglist import parse_taglist
from alien_rfid.core.exceptions import AlienRfidError, TransportError, ConnectionError, ProtocolError, \
    AuthError, OverrideStackError, UnexpectedResponseError
from alien_rfid.core.overrides import OverrideStack
from alien_rfid.core.status import ConnectionStatus
from alien_rfid.core.tag import TagRecord
from alien_rfid.transport.base import BaseTransport

logger = logging.getLogger(__name__)

Props = Mapping[str, Any]

class ReaderClient:
    """
    Main class for talking to an Alien RFID reader.

    The client owns its transport exclusively. Every call blocks until the
    reader has answered or the timeout has run out; there is no retry. A
    client is not safe to share between threads without external locking.

    Typical use::

        transport = TcpTransport.from_address("alien1.example.com")
        with ReaderClient(transport, PersistTime=0, AcquireMode='Inventory') as reader:
            for tag in reader.readtags(AntennaSequence=[0, 1]):
                print(tag.id, tag.antenna)
    """

    def __init__(self, transport: BaseTransport, timeout: float = alien_const.DEFAULT_TIMEOUT,
                 login: Optional[str] = None, password: Optional[str] = None,
                 settings: Optional[Props] = None, **initial_settings: Any):
        """
        Opens the session.

        Logs in when both ``login`` and ``password`` are given, applies the
        initial settings, then forces the text tag-list format.

        Args:
            transport: An instance of a BaseTransport implementation. It is
                       connected here if it is not connected yet.
            timeout: Seconds allowed for every write and every read.
            login: Optional login name for the reader's network service.
            password: Password matching ``login``.
            settings: Initial settings to apply, as a mapping.
            **initial_settings: More initial settings, as keyword arguments.
                Unknown names are tolerated here so that wrappers can pass
                their own options through.

        Raises:
            AuthError: If the login is rejected.
            ProtocolError: If an initial setting or the tag-list format
                           cannot be applied.
            TransportError: On any transport failure.
        """
        if not isinstance(transport, BaseTransport):
            raise TypeError("transport must be an instance of BaseTransport")

        self._transport = transport
        self._timeout = alien_settings.encode_timeout(timeout)
        self._debug = False
        self._overrides = OverrideStack()
        self._state = ConnectionStatus.CONNECTING

        try:
            if not self._transport.is_connected():
                self._transport.connect()
            if login is not None and password is not None:
                self._login(login, password)
            self._apply_initial_settings({**(settings or {}), **initial_settings})
            self._force_taglist_format()
        except AlienRfidError:
            self._state = ConnectionStatus.STALE
            self._transport.disconnect()
            raise

        self._state = ConnectionStatus.CONNECTED
        logger.info(f"ReaderClient initialized over {type(transport).__name__}")

    # --- Session ---

    @property
    def status(self) -> ConnectionStatus:
        """Returns the current session state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionStatus.CONNECTED

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def debug(self) -> bool:
        return self._debug

    @property
    def override_depth(self) -> int:
        """Number of override snapshots waiting to be popped."""
        return len(self._overrides)

    def _login(self, login: str, password: str) -> None:
        logger.info(f"Logging in as '{login}'")
        self._transport.write(framing.build_line(login), timeout=self._timeout)
        self._transport.read_until(alien_const.PASSWORD_PROMPT, timeout=self._timeout)
        self._transport.write(framing.build_line(password), timeout=self._timeout)
        reply = self._transport.read_until(alien_const.COMMAND_PROMPT, timeout=self._timeout)
        if not reply.endswith(alien_const.LOGIN_BANNER):
            logger.error(f"Login as '{login}' rejected by reader: {reply!r}")
            raise AuthError(f"Login as '{login}' failed.", reply=reply)
        logger.info("Login accepted")

    def _apply_initial_settings(self, props: Dict[str, Any]) -> None:
        errors = []
        for error in self.set(props):
            if error.lower().startswith(alien_const.UNKNOWN_SETTING_PREFIX.lower()):
                logger.warning(f"Ignoring initial option: {error}")
            else:
                errors.append(error)
        if errors:
            logger.error(f"Could not set requested options: {errors}")
            raise ProtocolError(f"Could not set requested options: {'; '.join(errors)}")

    def _force_taglist_format(self) -> None:
        name = Setting.TAG_LIST_FORMAT.wire_name
        command = f"{alien_const.VERB_SET} {name} = {alien_const.TAGLIST_FORMAT_TEXT}"
        response = self._command(command)
        if not framing.is_set_acknowledged(response, name):
            logger.error(f"Couldn't set {name} to {alien_const.TAGLIST_FORMAT_TEXT}: {response!r}")
            raise UnexpectedResponseError(f"Couldn't set {name} to {alien_const.TAGLIST_FORMAT_TEXT}.",
                                          command=command, response=response)

    def close(self) -> None:
        """Closes the transport. The client cannot be used afterwards."""
        if self._state == ConnectionStatus.CLOSED:
            return
        if self._overrides:
            logger.warning(f"Closing with {len(self._overrides)} settings override(s) still pushed")
        self._state = ConnectionStatus.CLOSED
        self._transport.disconnect()
        logger.info("ReaderClient closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # --- Settings ---

    def set(self, props: Optional[Props] = None, **kwargs: Any) -> List[str]:
        """
        Sets reader properties or client state.

        Takes a mapping and/or keyword arguments of setting names
        (case-insensitive) to values. A failure on one key does not stop the
        others; failures are collected instead of raised::

            errors = reader.set(PersistTime=0, AntennaSequence=[0, 1])
            if errors:
                ...

        Returns:
            A list of error strings, empty on success.

        Raises:
            ValidationError: If a value does not follow its setting's grammar.
            TransportError: On any transport failure.
        """
        errors: List[str] = []
        for name, value in {**(props or {}), **kwargs}.items():
            spec = alien_settings.resolve(name)
            if spec is None:
                errors.append(f"{alien_const.UNKNOWN_SETTING_PREFIX} '{name}'")
                continue
            if spec.access in (Access.READ_ONLY, Access.INTERNAL):
                errors.append(f"Setting '{spec.name}' cannot be set")
                continue
            encoded = spec.encode(value)
            if spec.access is Access.LOCAL:
                self._set_local(spec.setting, encoded)
            else:
                errors.extend(self._simple_set(spec.name, encoded))
        return errors

    def _simple_set(self, name: str, raw: Any) -> List[str]:
        response = self._command(f"{alien_const.VERB_SET} {name} = {raw}")
        if not framing.is_set_acknowledged(response, name):
            logger.warning(f"set {name} rejected by reader: {response!r}")
            return [f"set {name} command failed!  Reader said: {response}"]
        return []

    def _set_local(self, setting: Setting, value: Any) -> None:
        if setting is Setting.DEBUG:
            self._debug = value
        elif setting is Setting.TIMEOUT:
            self._timeout = value
        logger.debug(f"Local setting {setting.wire_name} = {value!r}")

    def get(self, *names: Union[str, List[str]]) -> Any:
        """
        Gets reader properties or client state.

        With one name the decoded value is returned directly; with several,
        a dict maps each requested name to its value. A value the reader
        does not report in the expected shape comes back as None::

            mode = reader.get('AcquireMode')
            props = reader.get('AcquireMode', 'PersistTime', 'ReaderVersion')

        All names are checked before anything is sent, so an unknown name
        fails the whole call without touching the reader.

        Raises:
            UnknownSettingError: If any name is not a recognized setting.
            TransportError: On any transport failure.
        """
        if len(names) == 1 and isinstance(names[0], (list, tuple)):
            names = tuple(names[0])
        if not names:
            raise ValueError("get() needs at least one setting name")

        specs = [alien_settings.require(name) for name in names]
        values = {name: self._get_one(spec) for name, spec in zip(names, specs)}
        if len(names) == 1:
            return values[names[0]]
        return values

    def _get_one(self, spec: SettingSpec) -> Any:
        if spec.access is Access.LOCAL:
            return self._get_local(spec.setting)
        if spec.query:
            return spec.decode(self._command(spec.query))

        response = self._command(f"{alien_const.VERB_GET} {spec.name}")
        raw = framing.parse_get_response(response, spec.name)
        if raw is None:
            logger.warning(f"Unexpected answer to get {spec.name}: {response!r}")
            return None
        return spec.decode(raw)

    def _get_local(self, setting: Setting) -> Any:
        if setting is Setting.DEBUG:
            return self._debug
        return self._timeout

    # --- Settings overrides ---

    def push_overrides(self, props: Optional[Props] = None, **kwargs: Any) -> List[str]:
        """
        Saves the current values of the given settings, then applies the new ones.

        Prefer :meth:`overrides`, which guarantees the matching pop.

        Returns:
            The error list from applying the new values.

        Raises:
            UnknownSettingError: If a name is not a recognized setting.
            OverrideStackError: If a current value cannot be read back.
            ValidationError: If a new value is malformed. Values already applied
                             are put back and the snapshot is dropped.
        """
        props = {**(props or {}), **kwargs}
        snapshot: Dict[str, Any] = {}
        for name in props:
            current = self.get(name)
            if current is None:
                logger.error(f"Couldn't get initial value of '{name}'")
                raise OverrideStackError(f"Couldn't get initial value of '{name}'")
            snapshot[name] = current
        self._overrides.push(snapshot)

        try:
            errors = self.set(props)
        except AlienRfidError:
            self._rollback_push()
            raise
        if errors:
            logger.warning(f"Errors applying settings overrides: {errors}")
        return errors

    def _rollback_push(self) -> None:
        """Drops the latest snapshot after a failed push, restoring it when the link is still usable."""
        snapshot = self._overrides.pop()
        if self._state in (ConnectionStatus.STALE, ConnectionStatus.CLOSED):
            logger.error(f"Settings overrides {sorted(snapshot)} not restored: client is {self._state}")
            return
        errors = self.set(snapshot)
        if errors:
            logger.warning(f"Errors restoring settings after failed override: {errors}")

    def pop_overrides(self) -> List[str]:
        """
        Restores the settings saved by the latest :meth:`push_overrides`.

        Raises:
            OverrideStackError: If nothing was pushed.
        """
        snapshot = self._overrides.pop()
        errors = self.set(snapshot)
        if errors:
            logger.warning(f"Errors restoring settings overrides: {errors}")
        return errors

    @contextmanager
    def overrides(self, props: Optional[Props] = None, **kwargs: Any) -> Iterator["ReaderClient"]:
        """
        Applies settings for the duration of a ``with`` block.

        The previous values are restored on every exit path. If the block
        left the client stale (timeout, lost link) the snapshot is dropped
        without talking to the reader, since the stream can no longer be
        trusted.
        """
        props = {**(props or {}), **kwargs}
        if not props:
            yield self
            return

        self.push_overrides(props)
        try:
            yield self
        finally:
            if self._state in (ConnectionStatus.STALE, ConnectionStatus.CLOSED):
                self._overrides.pop()
                logger.error(f"Settings overrides {sorted(props)} not restored: client is {self._state}")
            else:
                self.pop_overrides()

    # --- Tag commands ---

    def readtags(self, overrides: Optional[Props] = None, numreads: Optional[int] = None,
                 **kwargs: Any) -> List[TagRecord]:
        """
        Reads the tags in the reader's field.

        Which tags are seen depends on the Mask and AntennaSequence
        settings. Settings passed here are applied for this call only and
        restored before returning; to use the same settings for many calls,
        apply them once with :meth:`set` instead.

        Args:
            overrides: Settings to apply for this call only.
            numreads: Optional read count passed to ``get TagList``. May also
                      be given as a ``Numreads`` override.
            **kwargs: More per-call settings.

        Returns:
            The (possibly empty) list of TagRecords, in reader order.
        """
        props = {**(overrides or {}), **kwargs}
        for key in [k for k in props if k.lower() == 'numreads']:
            value = props.pop(key)
            if numreads is None:
                numreads = value

        command = alien_const.CMD_GET_TAGLIST
        if numreads:
            command += f" {numreads}"

        with self.overrides(props):
            payload = self._command(command)
        tags = parse_taglist(payload)
        logger.debug(f"readtags returned {len(tags)} tag(s)")
        return tags

    def sleeptags(self, overrides: Optional[Props] = None, **kwargs: Any) -> bool:
        """
        Asks every addressed tag to go to sleep, so it ignores the reader
        until woken. Per-call settings work as in :meth:`readtags`.
        """
        with self.overrides(overrides, **kwargs):
            self._command(alien_const.CMD_SLEEP)
        return True

    def waketags(self, overrides: Optional[Props] = None, **kwargs: Any) -> bool:
        """Wakes every addressed tag put to sleep by :meth:`sleeptags`."""
        with self.overrides(overrides, **kwargs):
            self._command(alien_const.CMD_WAKE)
        return True

    def reboot(self) -> None:
        """
        Reboots the reader.

        No answer is awaited. The client is stale afterwards; create a new
        one once the reader is back up.
        """
        self._ensure_usable()
        self._send(alien_const.CMD_REBOOT)
        self._state = ConnectionStatus.STALE
        logger.info("Reboot issued; this client must be replaced")

    # --- Command exchange ---

    def _ensure_usable(self) -> None:
        if self._state not in (ConnectionStatus.CONNECTING, ConnectionStatus.CONNECTED):
            raise ConnectionError(f"Reader client is {self._state}; create a new client.")

    def _send(self, command: str) -> None:
        frame = framing.build_command(command)
        if self._debug:
            logger.debug(f"sending cmd: {command!r}")
        try:
            self._transport.write(frame, timeout=self._timeout)
        except TransportError as e:
            self._state = ConnectionStatus.STALE
            logger.error(f"Failed to send {command!r}: {e}")
            raise

    def _command(self, command: str) -> str:
        """Sends one command and returns the reader's answer, minus any echo."""
        self._ensure_usable()
        self._send(command)
        try:
            response = self._transport.read_until(alien_const.RESPONSE_TERMINATOR, timeout=self._timeout)
        except TransportError as e:
            self._state = ConnectionStatus.STALE
            logger.error(f"No answer to {command!r}: {e}")
            raise
        if self._debug:
            logger.debug(f" got resp: {response!r}")
        return framing.strip_echo(response, command)
